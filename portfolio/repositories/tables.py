# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Table definitions for members, projects and the project staff link."""
from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Integer, MetaData, Numeric, String,
    Table, Text, UniqueConstraint,
)

metadata = MetaData()

members = Table(
    "members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False),
    UniqueConstraint("name", "role", name="uq_members_name_role"),
)

projects = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("expected_end_date", Date, nullable=False),
    Column("actual_end_date", Date, nullable=True),
    Column("total_budget", Numeric(15, 2), nullable=False),
    Column("description", Text, nullable=True),
    Column("status", String(32), nullable=False, index=True),
    Column("risk_classification", String(16), nullable=True),
    Column("manager_id", Integer, ForeignKey("members.id"), nullable=False, index=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

project_staff = Table(
    "project_staff",
    metadata,
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"),
           primary_key=True),
    Column("member_id", Integer, ForeignKey("members.id"), primary_key=True),
)
