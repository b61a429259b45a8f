"""Seed the database and Asset Store with a demo account and sample flipbooks.

Each sample deck is generated on the fly with PyMuPDF, stored in the
``pdfs`` bucket, given a thumbnail and recorded as a ready flipbook.

Run from the project root:
    python -m scripts.seed_data
"""

import asyncio
import sys
import uuid
from pathlib import Path

# Add project root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import fitz  # PyMuPDF
from sqlalchemy import delete, select

from flipdeck.auth.passwords import hash_password
from flipdeck.database import async_session_factory, engine
from flipdeck.models.flipbook import Flipbook
from flipdeck.models.user import User
from flipdeck.models.user_role import UserRole
from flipdeck.rendering.rasterizer import PdfSource, render_thumbnail
from flipdeck.rendering.worker import shutdown_render_worker
from flipdeck.storage.asset_store import get_asset_store

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_USER = {
    "email": "demo@flipdeck.app",
    "password": "demo1234",
    "name": "Demo Publisher",
}

# Free plan allows three flipbooks; the demo account uses two of them
DECKS = [
    {
        "title": "Q1 Review",
        "pages": ["Q1 Review", "Revenue", "Pipeline", "Hiring", "Next Quarter"],
        "size": (842, 595),  # A4 landscape
        "background_color": "#F4F1EA",
    },
    {
        "title": "Product Catalogue",
        "pages": ["Spring Collection", "Lamps", "Chairs", "Tables"],
        "size": (595, 842),  # A4 portrait
        "background_color": "#1E293B",
    },
]


def _build_pdf(pages: list[str], width: float, height: float) -> bytes:
    document = fitz.open()
    for heading in pages:
        page = document.new_page(width=width, height=height)
        page.insert_text((72, 96), heading, fontsize=36)
    data = document.tobytes()
    document.close()
    return data


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Create the demo user with sample flipbooks.

    Idempotent: an existing demo user is deleted (flipbooks and role rows
    cascade) and everything is recreated. Old storage objects are left in
    place; new uploads use fresh paths.
    """
    store = get_asset_store()

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.email == DEMO_USER["email"]))
        existing_user = result.scalar_one_or_none()

        if existing_user is not None:
            print(f"Demo user '{DEMO_USER['email']}' already exists. Deleting and re-seeding...")
            await session.execute(delete(Flipbook).where(Flipbook.user_id == existing_user.id))
            await session.execute(delete(UserRole).where(UserRole.user_id == existing_user.id))
            await session.execute(delete(User).where(User.id == existing_user.id))
            await session.flush()

        user = User(
            email=DEMO_USER["email"],
            hashed_password=hash_password(DEMO_USER["password"]),
            name=DEMO_USER["name"],
            is_active=True,
        )
        session.add(user)
        await session.flush()
        print(f"Created demo user: {user.email} (id={user.id})")

        for deck in DECKS:
            width, height = deck["size"]
            pdf_bytes = _build_pdf(deck["pages"], width, height)

            pdf_path = f"{user.id}/{uuid.uuid4()}.pdf"
            await store.upload("pdfs", pdf_path, pdf_bytes)

            thumbnail = await render_thumbnail(PdfSource.from_bytes(pdf_bytes))
            thumbnail_path = f"{user.id}/{uuid.uuid4()}_thumb.jpg"
            await store.upload("thumbnails", thumbnail_path, thumbnail.image)

            session.add(
                Flipbook(
                    user_id=user.id,
                    title=deck["title"],
                    status="ready",
                    pdf_storage_path=pdf_path,
                    thumbnail_path=thumbnail_path,
                    background_color=deck["background_color"],
                )
            )
            print(f"   {deck['title']}: {len(deck['pages'])} pages -> {store.get_public_url('pdfs', pdf_path)}")

        await session.commit()

    shutdown_render_worker()
    await engine.dispose()

    print()
    print(f"Done! Log in as {DEMO_USER['email']} / {DEMO_USER['password']} (free plan, {len(DECKS)} flipbooks)")


if __name__ == "__main__":
    asyncio.run(seed())
