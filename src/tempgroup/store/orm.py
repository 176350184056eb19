"""SQLAlchemy 2.0 ORM tables for tempgroup.

Uses ``DeclarativeBase`` with a ``type_annotation_map`` that maps plain
Python types to portable column types, so ``Mapped[str]`` resolves to
``Text`` on every backend.

Tables
------
* ``address``               -- the records being grouped
* ``batch_job_execution``   -- one row per job run (see ``batch.ledger``)
* ``batch_step_execution``  -- one row per step of a job run

Usage::

    from tempgroup.store.orm import TempGroupBase
    TempGroupBase.metadata.create_all(engine)
"""

from __future__ import annotations

import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class TempGroupBase(DeclarativeBase):
    """Shared declarative base for every tempgroup table."""

    type_annotation_map = {
        str: Text,
        int: Integer,
        datetime.datetime: DateTime,
        dict: JSON,
    }


class RecordTable(TempGroupBase):
    __tablename__ = "address"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[str | None] = mapped_column(Text)
    group_key: Mapped[str | None] = mapped_column(Text)
    account_id: Mapped[str] = mapped_column(Text, nullable=False)
    temp_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_address_account_id", "account_id"),)


class JobExecutionTable(TempGroupBase):
    __tablename__ = "batch_job_execution"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    job_name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    params: Mapped[dict | None] = mapped_column(JSON, default=None)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    started_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    final_identifier: Mapped[str | None] = mapped_column(Text)
    known_accounts: Mapped[int | None] = mapped_column(Integer)
    error: Mapped[str | None] = mapped_column(Text)
    error_type: Mapped[str | None] = mapped_column(Text)
    failed_step: Mapped[str | None] = mapped_column(Text)

    steps: Mapped[list[StepExecutionTable]] = relationship(
        "StepExecutionTable",
        back_populates="job_execution",
        cascade="all, delete-orphan",
        order_by="StepExecutionTable.position",
    )


class StepExecutionTable(TempGroupBase):
    __tablename__ = "batch_step_execution"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_execution_id: Mapped[str] = mapped_column(
        Text,
        ForeignKey("batch_job_execution.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    step_name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    started_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    metrics: Mapped[dict | None] = mapped_column(JSON, default=None)
    error: Mapped[str | None] = mapped_column(Text)
    error_type: Mapped[str | None] = mapped_column(Text)

    job_execution: Mapped[JobExecutionTable] = relationship(
        "JobExecutionTable", back_populates="steps"
    )
