"""Page publishing: create or update a WordPress page from Markdown."""

from dataclasses import dataclass, field

from wpsync.client import WordPressClient
from wpsync.converter import split_title_and_content
from wpsync.utils import get_logger


@dataclass
class PublishResult:
    """Outcome of a successful publish."""

    page_id: int | None
    slug: str
    link: str | None
    created: bool
    parent_id: int = 0
    raw: dict = field(default_factory=dict)


def publish(
    client: WordPressClient,
    collection: str,
    markdown: str,
    slug: str,
    parent_slug: str | None = None,
    order: int = 0,
    options: dict | None = None,
    post_status: str | None = None,
) -> PublishResult:
    """Upsert a page by slug.

    The page is updated when a page with this slug already exists and
    created otherwise. A parent slug that cannot be resolved places the page
    at the root instead of failing.

    Args:
        client: WordPress client for this run.
        collection: REST collection, e.g. "pages".
        markdown: Markdown document; first line is the title.
        slug: Page slug.
        parent_slug: Slug of the parent page, if any.
        order: Menu order.
        options: Markdown rendering options.
        post_status: Status to set on the page, e.g. "publish". Omitted when None.

    Returns:
        PublishResult for the written page.

    Raises:
        PublishError: If any API request fails.
    """
    logger = get_logger()

    title, content = split_title_and_content(markdown, options)

    parent_id = 0
    if parent_slug:
        found = client.get_page_id_by_slug(parent_slug, collection)
        if found is None:
            logger.warning(f"Parent page '{parent_slug}' not found for '{slug}', publishing at root")
        else:
            parent_id = found

    payload = {
        "title": title,
        "content": content,
        "slug": slug,
        "parent": parent_id,
        "menu_order": order,
    }
    if post_status:
        payload["status"] = post_status

    existing_id = client.get_page_id_by_slug(slug, collection)
    if existing_id is not None:
        logger.debug(f"Updating {collection}/{existing_id} ({slug})")
        response = client.update_page(collection, existing_id, payload)
        created = False
        page_id = existing_id
    else:
        logger.debug(f"Creating {collection} page ({slug})")
        response = client.create_page(collection, payload)
        created = True
        page_id = response.get("id")
        if page_id is not None:
            client.remember(slug, page_id, collection)

    return PublishResult(
        page_id=page_id,
        slug=slug,
        link=response.get("link"),
        created=created,
        parent_id=parent_id,
        raw=response,
    )


def publish_by_id(
    client: WordPressClient,
    collection: str,
    content_id: int,
    markdown: str,
    slug: str,
    options: dict | None = None,
) -> PublishResult:
    """Update a post or page addressed directly by id.

    Used for manifest entries that carry a content_id. No slug lookup and no
    parent handling is done.
    """
    title, content = split_title_and_content(markdown, options)

    response = client.update_page(
        collection,
        content_id,
        {"title": title, "content": content, "slug": slug},
    )

    return PublishResult(
        page_id=content_id,
        slug=slug,
        link=response.get("link"),
        created=False,
        raw=response,
    )
