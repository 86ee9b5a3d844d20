"""Create subscription_tokens table.

Revision ID: 002
Revises: 001
Create Date: 2021-08-10

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create subscription_tokens table."""
    op.create_table(
        "subscription_tokens",
        sa.Column("subscription_token", sa.String(length=25), nullable=False),
        sa.Column("subscriber_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["subscriber_id"], ["subscriptions.id"]),
        sa.PrimaryKeyConstraint("subscription_token"),
    )

    op.create_index(
        "ix_subscription_tokens_subscriber_id",
        "subscription_tokens",
        ["subscriber_id"],
    )


def downgrade() -> None:
    """Drop subscription_tokens table."""
    op.drop_index(
        "ix_subscription_tokens_subscriber_id", table_name="subscription_tokens"
    )
    op.drop_table("subscription_tokens")
