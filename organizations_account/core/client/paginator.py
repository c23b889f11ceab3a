from typing import Any, AsyncGenerator, List

from loguru import logger


class AsyncPaginator:
    """
    Walks an aiobotocore paginator and hands back the items found under
    `list_param` on every page.

    Keyword arguments given at construction are sent with every call; the ones
    given to `paginate`/`collect` take precedence over them.
    """

    __slots__ = ("client", "method_name", "list_param", "default_kwargs")

    def __init__(
        self, client: Any, method_name: str, list_param: str, **default_kwargs: Any
    ):
        self.client = client
        self.method_name = method_name
        self.list_param = list_param
        self.default_kwargs = default_kwargs

    async def paginate(self, **kwargs: Any) -> AsyncGenerator[List[Any], None]:
        pages = self.client.get_paginator(self.method_name).paginate(
            **{**self.default_kwargs, **kwargs}
        )
        page_number = 0
        async for page in pages:
            page_number += 1
            items = page.get(self.list_param, [])
            logger.debug(
                f"{self.method_name} page {page_number} returned {len(items)} {self.list_param}"
            )
            yield items

    async def collect(self, **kwargs: Any) -> List[Any]:
        """Drain every page into a single list."""
        collected: List[Any] = []
        async for items in self.paginate(**kwargs):
            collected.extend(items)
        return collected
