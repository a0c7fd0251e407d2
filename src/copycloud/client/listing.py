"""Watermark driven pagination over ``list_objects``."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping

from copycloud.client.session import ApiSession
from copycloud.core.constants import DEFAULT_PAGE_SIZE, LIST_OBJECTS_METHOD
from copycloud.core.errors import CodecError
from copycloud.core.models import Listing, ListPage
from copycloud.monitoring.metrics import LIST_PAGES
from copycloud.utils.logging import get_logger

logger = get_logger(__name__)


def _same_watermark(new: Any, previous: Any) -> bool:
    # The opening ``False`` must not equal an integer cursor of 0 (or 1 == True)
    return type(new) is type(previous) and new == previous


class Paginator:
    """
    Lists a remote path page by page.

    The first request starts from ``list_watermark = false``. Each page with
    children advances the watermark to the server's cursor; a page without
    children carries the listed object itself and ends the listing. Pages are
    requested only while the server reports ``more_items``.
    """

    def __init__(self, session: ApiSession, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.session = session
        self.page_size = page_size

    def iter_pages(self, path: str, **options: Any) -> Iterator[ListPage]:
        """
        Yield raw pages in server order.

        Extra ``options`` (e.g. ``include_parts=True``) are merged into every
        request.

        Raises:
            RemoteError: A page carried an error
            CodecError: Malformed page, or ``more_items`` without a new watermark
        """
        request: Dict[str, Any] = {
            "path": path,
            "max_items": self.page_size,
            "list_watermark": False,
        }
        request.update(options)

        while True:
            result = self.session.call(LIST_OBJECTS_METHOD, dict(request)).unwrap(
                "Error listing path"
            )
            if not isinstance(result, Mapping):
                raise CodecError(f"Unexpected list_objects result: {result!r}")

            page = ListPage.from_result(result)
            LIST_PAGES.inc()
            logger.debug(
                "list_page",
                path=path,
                children=len(page.children),
                more_items=page.more_items,
            )
            yield page

            if not page.children or not page.more_items:
                return
            previous = request["list_watermark"]
            if page.watermark is None or _same_watermark(page.watermark, previous):
                raise CodecError(
                    f"Listing of {path} reports more items but did not advance "
                    f"the watermark ({page.watermark!r})"
                )
            request["list_watermark"] = page.watermark

    def list_path(self, path: str, **options: Any) -> Listing:
        """
        Collect every page for ``path`` into one ordered listing.

        On failure nothing is returned; items gathered from earlier pages are
        discarded with the exception.
        """
        listing = Listing(watermark=options.get("list_watermark", False))
        for page in self.iter_pages(path, **options):
            listing.pages += 1
            if page.children:
                listing.items.extend(page.children)
                if page.watermark is not None:
                    listing.watermark = page.watermark
            elif page.root is not None:
                listing.items.append(page.root)

        logger.info("path_listed", path=path, items=len(listing), pages=listing.pages)
        return listing


__all__ = ["Paginator"]
