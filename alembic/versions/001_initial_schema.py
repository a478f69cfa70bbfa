"""Initial schema - permission catalog, roles, overrides, business rules, audit.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# (category, resource_type, actions)
CATALOG = [
    ("administration", "permission", ["read"]),
    ("administration", "role", ["read", "manage"]),
    ("administration", "user_override", ["manage"]),
    ("administration", "business_rule", ["read", "manage"]),
    ("administration", "audit", ["read"]),
    ("customers", "customer", ["read", "create", "update", "delete"]),
    ("sales", "invoice", ["read", "create", "update", "delete"]),
    ("sales", "pos", ["read", "create", "update", "process"]),
    ("sales", "pricing", ["view", "manage", "override"]),
    ("inventory", "product", ["read", "create", "update", "delete"]),
    ("inventory", "inventory", ["read", "adjust"]),
    ("inventory", "supplier", ["read", "create", "manage"]),
    ("operations", "job", ["read", "create", "update", "delete", "assign"]),
    ("operations", "service", ["read", "create", "update", "delete"]),
    ("operations", "asset", ["read", "create", "update"]),
    ("staff", "staff", ["read", "create", "update"]),
    ("staff", "attendance", ["read", "clock_in"]),
    ("staff", "timesheet", ["read", "approve"]),
    ("reports", "reports", ["read", "generate"]),
    ("reports", "analytics", ["view"]),
]

SYSTEM_ROLES = [
    ("owner", "Business owner - every permission"),
    ("admin", "Administrator - everything except audit and rule management"),
    ("manager", "Day-to-day management"),
    ("staff", "Front-line staff"),
]

ADMIN_EXCLUDED = ["audit:read", "business_rule:manage"]
MANAGER_GRANTS = [
    "permission:read", "role:read", "business_rule:read",
    "customer:read", "customer:create", "customer:update",
    "invoice:read", "invoice:create", "invoice:update",
    "pos:read", "pos:create", "pos:update", "pos:process", "pricing:view", "pricing:override",
    "product:read", "product:update", "inventory:read", "inventory:adjust", "supplier:read",
    "job:read", "job:create", "job:update", "job:assign",
    "service:read", "service:create", "service:update", "asset:read",
    "staff:read", "attendance:read", "timesheet:read", "timesheet:approve",
    "reports:read", "analytics:view",
]
STAFF_GRANTS = [
    "customer:read", "customer:create", "invoice:read", "invoice:create",
    "pos:read", "pos:create", "pos:process", "pricing:view",
    "product:read", "inventory:read", "job:read", "job:update", "service:read",
    "attendance:clock_in",
]


def _names(values: list[str]) -> str:
    return ", ".join(f"'{v}'" for v in values)


def upgrade() -> None:
    op.create_table(
        "permission",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
    )
    op.create_index("ix_permission_name", "permission", ["name"], unique=True)

    op.create_table(
        "role",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("business_id", sa.UUID(), nullable=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("is_system_role", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index(
        "ux_role_business_name", "role", ["business_id", "name"],
        unique=True, postgresql_where=sa.text("business_id IS NOT NULL"),
    )
    op.create_index(
        "ux_role_system_name", "role", ["name"],
        unique=True, postgresql_where=sa.text("business_id IS NULL"),
    )

    op.create_table(
        "role_permission",
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id", sa.UUID(), sa.ForeignKey("permission.id", ondelete="CASCADE"), primary_key=True
        ),
    )

    op.create_table(
        "user_role",
        sa.Column("user_id", sa.String(255), primary_key=True),
        sa.Column("business_id", sa.UUID(), primary_key=True),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "user_override",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("business_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column(
            "permission_id", sa.UUID(), sa.ForeignKey("permission.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("is_allowed", sa.Boolean(), nullable=False),
        sa.Column("granted_by", sa.String(255), nullable=False),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(255), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
    )
    # at most one active override per (business, user, permission)
    op.create_index(
        "ux_user_override_active", "user_override", ["business_id", "user_id", "permission_id"],
        unique=True, postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "business_rule",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("business_id", sa.UUID(), nullable=False),
        sa.Column("subject_type", sa.String(10), nullable=False),
        sa.Column("subject_id", sa.String(255), nullable=False),
        sa.Column(
            "permission_id", sa.UUID(), sa.ForeignKey("permission.id", ondelete="CASCADE"), nullable=True
        ),
        sa.Column("condition_type", sa.String(20), nullable=False),
        sa.Column("condition", JSONB(), nullable=False),
        sa.Column("effect", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.CheckConstraint("subject_type IN ('user', 'role')", name="ck_business_rule_subject_type"),
        sa.CheckConstraint("effect IN ('allow', 'deny')", name="ck_business_rule_effect"),
    )
    op.create_index(
        "ix_business_rule_subject", "business_rule", ["business_id", "subject_type", "subject_id"]
    )

    op.create_table(
        "audit_entry",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("business_id", sa.UUID(), nullable=False),
        sa.Column("actor_user_id", sa.String(255), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("permission_name", sa.String(100), nullable=True),
        sa.Column("subject_user_id", sa.String(255), nullable=True),
        sa.Column("decision", sa.String(10), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("details", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_audit_entry_business_created", "audit_entry",
        ["business_id", sa.text("created_at DESC"), sa.text("id DESC")],
    )

    # Seed catalog
    rows = []
    for category, resource_type, actions in CATALOG:
        for action in actions:
            name = f"{resource_type}:{action}"
            rows.append(
                f"('{name}', '{category}', '{resource_type}', '{action}', "
                f"'{action.replace('_', ' ').capitalize()} {resource_type.replace('_', ' ')}')"
            )
    op.execute(
        "INSERT INTO permission (name, category, resource_type, action, description) VALUES\n"
        + ",\n".join(rows)
    )

    # Seed system roles
    op.execute(
        "INSERT INTO role (name, description, is_system_role) VALUES\n"
        + ",\n".join(f"('{name}', '{desc}', TRUE)" for name, desc in SYSTEM_ROLES)
    )
    op.execute("""
        INSERT INTO role_permission (role_id, permission_id)
        SELECT r.id, p.id FROM role r CROSS JOIN permission p
        WHERE r.name = 'owner' AND r.business_id IS NULL
    """)
    op.execute(f"""
        INSERT INTO role_permission (role_id, permission_id)
        SELECT r.id, p.id FROM role r CROSS JOIN permission p
        WHERE r.name = 'admin' AND r.business_id IS NULL
        AND p.name NOT IN ({_names(ADMIN_EXCLUDED)})
    """)
    for role_name, grants in (("manager", MANAGER_GRANTS), ("staff", STAFF_GRANTS)):
        op.execute(f"""
            INSERT INTO role_permission (role_id, permission_id)
            SELECT r.id, p.id FROM role r CROSS JOIN permission p
            WHERE r.name = '{role_name}' AND r.business_id IS NULL
            AND p.name IN ({_names(grants)})
        """)


def downgrade() -> None:
    op.drop_table("audit_entry")
    op.drop_table("business_rule")
    op.drop_table("user_override")
    op.drop_table("user_role")
    op.drop_table("role_permission")
    op.drop_table("role")
    op.drop_table("permission")
