"""Initial schema: content, translations, navigation, users, settings.

Revision ID: 1a2b3c4d5e6f
Revises:
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
import sqlmodel

revision: str = "1a2b3c4d5e6f"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

AutoString = sqlmodel.sql.sqltypes.AutoString

publish_status = sa.Enum("DRAFT", "PUBLISHED", name="publishstatus")
review_status = sa.Enum("PENDING", "APPROVED", name="reviewstatus")
user_role = sa.Enum(
    "ADMINISTRATOR", "EDITOR", "AUTHOR", "CONTRIBUTOR", "SUBSCRIBER", name="userrole"
)
user_status = sa.Enum("ACTIVE", "INACTIVE", "SUSPENDED", name="userstatus")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("username", AutoString(length=100), nullable=False),
        sa.Column("email", AutoString(length=255), nullable=False),
        sa.Column("display_name", AutoString(length=255), nullable=False),
        sa.Column("first_name", AutoString(length=100), nullable=True),
        sa.Column("last_name", AutoString(length=100), nullable=True),
        sa.Column("avatar", AutoString(length=500), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("status", user_status, nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("hashed_password", AutoString(), nullable=False),
        sa.Column("login_attempts", sa.Integer(), nullable=False),
        sa.Column("locked_until", sa.DateTime(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("last_login_ip", AutoString(length=100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_username"), "user", ["username"], unique=True)
    op.create_index(op.f("ix_user_email"), "user", ["email"], unique=True)

    op.create_table(
        "user_session",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("token", AutoString(length=128), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("ip_address", AutoString(length=100), nullable=True),
        sa.Column("user_agent", AutoString(length=500), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_user_session_user_id"), "user_session", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_user_session_token"), "user_session", ["token"], unique=True
    )

    op.create_table(
        "package",
        sa.Column("slug", AutoString(length=255), nullable=False),
        sa.Column("title", AutoString(length=255), nullable=False),
        sa.Column("description", AutoString(), nullable=True),
        sa.Column("long_description", AutoString(), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("currency", AutoString(length=3), nullable=False),
        sa.Column("duration", AutoString(length=100), nullable=True),
        sa.Column("image_url", AutoString(length=500), nullable=True),
        sa.Column("gallery_images", sa.JSON(), nullable=True),
        sa.Column("destinations", sa.JSON(), nullable=True),
        sa.Column("includes", sa.JSON(), nullable=True),
        sa.Column("excludes", sa.JSON(), nullable=True),
        sa.Column("highlights", sa.JSON(), nullable=True),
        sa.Column("itinerary", sa.JSON(), nullable=True),
        sa.Column("faqs", sa.JSON(), nullable=True),
        sa.Column("group_size", AutoString(length=100), nullable=True),
        sa.Column("difficulty", AutoString(length=100), nullable=True),
        sa.Column("best_for", AutoString(length=255), nullable=True),
        sa.Column("departure", AutoString(length=255), nullable=True),
        sa.Column("return_point", AutoString(length=255), nullable=True),
        sa.Column("location", AutoString(length=255), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("status", publish_status, nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_package_slug"), "package", ["slug"], unique=True)

    op.create_table(
        "blog",
        sa.Column("slug", AutoString(length=255), nullable=False),
        sa.Column("title", AutoString(length=255), nullable=False),
        sa.Column("excerpt", AutoString(), nullable=True),
        sa.Column("content", AutoString(), nullable=True),
        sa.Column("category", AutoString(length=100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("author", AutoString(length=255), nullable=True),
        sa.Column("image_url", AutoString(length=500), nullable=True),
        sa.Column("status", publish_status, nullable=False),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_blog_slug"), "blog", ["slug"], unique=True)

    op.create_table(
        "gallery_item",
        sa.Column("title", AutoString(length=255), nullable=False),
        sa.Column("description", AutoString(), nullable=True),
        sa.Column("image_url", AutoString(length=500), nullable=False),
        sa.Column("category", AutoString(length=100), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "testimonial",
        sa.Column("name", AutoString(length=255), nullable=False),
        sa.Column("role", AutoString(length=255), nullable=True),
        sa.Column("content", AutoString(), nullable=False),
        sa.Column("package_name", AutoString(length=255), nullable=True),
        sa.Column("location", AutoString(length=255), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("avatar_url", AutoString(length=500), nullable=True),
        sa.Column("status", review_status, nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "section_content",
        sa.Column("title", AutoString(length=500), nullable=True),
        sa.Column("subtitle", AutoString(length=500), nullable=True),
        sa.Column("description", AutoString(), nullable=True),
        sa.Column("cta_text", AutoString(length=255), nullable=True),
        sa.Column("cta_link", AutoString(length=500), nullable=True),
        sa.Column("button_text", AutoString(length=255), nullable=True),
        sa.Column("image_url", AutoString(length=500), nullable=True),
        sa.Column("destinations", sa.JSON(), nullable=True),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("stats", sa.JSON(), nullable=True),
        sa.Column("items", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.Column("section_id", AutoString(length=100), nullable=False),
        sa.PrimaryKeyConstraint("section_id"),
    )

    op.create_table(
        "content_translation",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("content_type", AutoString(length=50), nullable=False),
        sa.Column("content_id", AutoString(length=100), nullable=False),
        sa.Column("language", AutoString(length=10), nullable=False),
        sa.Column("fields", sa.JSON(), nullable=True),
        sa.Column("is_auto_translated", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "content_type", "content_id", "language", name="uq_content_translation_key"
        ),
    )
    for column in ("content_type", "content_id", "language"):
        op.create_index(
            op.f(f"ix_content_translation_{column}"),
            "content_translation",
            [column],
            unique=False,
        )

    op.create_table(
        "navigation_menu",
        sa.Column("name", AutoString(length=255), nullable=False),
        sa.Column("location", AutoString(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_navigation_menu_location"), "navigation_menu", ["location"], unique=True
    )

    op.create_table(
        "navigation_item",
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_external", sa.Boolean(), nullable=False),
        sa.Column("target", AutoString(length=20), nullable=False),
        sa.Column("icon_type", AutoString(length=50), nullable=False),
        sa.Column("icon_name", AutoString(length=100), nullable=True),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("menu_id", sa.Uuid(), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(["menu_id"], ["navigation_menu.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["navigation_item.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_navigation_item_menu_id"), "navigation_item", ["menu_id"], unique=False
    )

    op.create_table(
        "navigation_item_translation",
        sa.Column("language", AutoString(length=10), nullable=False),
        sa.Column("title", AutoString(length=255), nullable=False),
        sa.Column("url", AutoString(length=500), nullable=False),
        sa.Column("id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["navigation_item.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("item_id", "language", name="uq_navigation_item_language"),
    )
    op.create_index(
        op.f("ix_navigation_item_translation_item_id"),
        "navigation_item_translation",
        ["item_id"],
        unique=False,
    )

    op.create_table(
        "site_settings",
        sa.Column("site_name", AutoString(length=255), nullable=False),
        sa.Column("site_url", AutoString(length=500), nullable=False),
        sa.Column("contact_email", AutoString(length=255), nullable=True),
        sa.Column("contact_phone", AutoString(length=50), nullable=True),
        sa.Column("default_language", AutoString(length=10), nullable=False),
        *_timestamps(),
        sa.Column("id", AutoString(length=50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "api_key_settings",
        *_timestamps(),
        sa.Column("id", AutoString(length=50), nullable=False),
        sa.Column("keys", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "sitemap_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("total_pages", sa.Integer(), nullable=False),
        sa.Column("last_generated", sa.DateTime(), nullable=True),
        sa.Column("google_pinged", sa.Boolean(), nullable=False),
        sa.Column("bing_pinged", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("sitemap_log")
    op.drop_table("api_key_settings")
    op.drop_table("site_settings")
    op.drop_table("navigation_item_translation")
    op.drop_table("navigation_item")
    op.drop_table("navigation_menu")
    op.drop_table("content_translation")
    op.drop_table("section_content")
    op.drop_table("testimonial")
    op.drop_table("gallery_item")
    op.drop_table("blog")
    op.drop_table("package")
    op.drop_table("user_session")
    op.drop_table("user")
    for enum in (user_status, user_role, review_status, publish_status):
        enum.drop(op.get_bind(), checkfirst=True)
