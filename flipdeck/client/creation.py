"""Creation workflow — validate, upload, thumbnail, insert.

Plan limits are checked here, before anything is uploaded. The server
re-checks them at its own boundary when ``ENFORCE_PLAN_LIMITS`` is on.
"""

import logging
import uuid

from flipdeck.billing.plans import (
    exceeds_file_size,
    file_size_message,
    flipbook_limit_message,
    flipbook_quota_reached,
    get_plan,
)
from flipdeck.client.api import FlipdeckAPIError, FlipdeckClient, LocalFile
from flipdeck.rendering.rasterizer import PdfSource, RenderError, render_thumbnail

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to create flipbook"


class CreationRejected(Exception):
    """The file or account failed a plan check. Nothing was uploaded."""


class CreationFailed(Exception):
    """Authentication, upload or insert failed part-way through."""


class CreationWorkflow:
    """State of one "create flipbook" dialog.

    Usage::

        workflow = CreationWorkflow(client)
        await workflow.load()
        record = await workflow.submit("Q1 Review", LocalFile.from_path("deck.pdf"))
    """

    def __init__(self, client: FlipdeckClient) -> None:
        self.client = client
        self.role = "free"
        self.flipbook_count = 0

    async def load(self) -> None:
        """Fetch the caller's role and flipbook count (the dialog opening)."""
        if not self.client.is_authenticated:
            return
        info = await self.client.get_plan()
        self.role = info["role"]
        self.flipbook_count = info["flipbooks_used"]

    def validate(self, file: LocalFile) -> None:
        """Raise ``CreationRejected`` if the plan does not allow this upload."""
        plan = get_plan(self.role)
        if exceeds_file_size(plan, file.size):
            raise CreationRejected(file_size_message(plan))
        if flipbook_quota_reached(plan, self.flipbook_count):
            raise CreationRejected(flipbook_limit_message(plan))

    async def submit(self, title: str, file: LocalFile | None) -> dict | None:
        """Create the flipbook and return its record.

        Returns ``None`` without doing anything when title or file is missing.
        """
        if not title or file is None:
            return None

        self.validate(file)

        try:
            user = await self.client.get_me()
            user_id = user["id"]

            pdf_path = f"{user_id}/{uuid.uuid4()}.{file.extension}"
            await self.client.upload("pdfs", pdf_path, file.data, "application/pdf")

            thumbnail_path = await self._generate_thumbnail(user_id, pdf_path)

            # Last step: a failure above leaves at most an orphaned upload
            record = await self.client.create_flipbook(
                title=title,
                pdf_storage_path=pdf_path,
                thumbnail_path=thumbnail_path,
                status="ready",
            )
        except FlipdeckAPIError as e:
            logger.error("Flipbook creation failed: %s", e.message)
            raise CreationFailed(e.message or DEFAULT_FAILURE_MESSAGE) from e

        self.flipbook_count += 1
        logger.info("Flipbook created successfully: %s", record["id"])
        return record

    async def _generate_thumbnail(self, user_id: str, pdf_path: str) -> str | None:
        """Render page 1 of the uploaded PDF. Failures are logged, never raised."""
        source = PdfSource.from_url(self.client.public_url("pdfs", pdf_path))
        try:
            thumbnail = await render_thumbnail(source, http_client=self.client.http)
            thumbnail_path = f"{user_id}/{uuid.uuid4()}_thumb.jpg"
            await self.client.upload("thumbnails", thumbnail_path, thumbnail.image, thumbnail.mime_type)
        except (RenderError, FlipdeckAPIError) as e:
            logger.error("Failed to generate thumbnail: %s", e)
            return None
        return thumbnail_path
