"""SQLite store for bookings, mirrored calendar events and integrations."""

from __future__ import annotations

import json
import sqlite3
import threading
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import (
    PAST_STATUSES,
    UPCOMING_STATUSES,
    CalendarIntegration,
    ConferenceLink,
    Contact,
    ContactType,
    EventDefinition,
    Host,
    HostProfile,
    Integration,
    IntegrationVendor,
    Invitee,
    NotificationTarget,
    NotificationType,
    ScheduledBufferTime,
    ScheduledEvent,
    ScheduledEventNotification,
    ScheduledEventSearchOption,
    ScheduledStatus,
    ScheduledTimeset,
    VendorMirroredScheduledEvent,
)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

DB_SCHEMA = """
CREATE TABLE IF NOT EXISTS scheduled_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    event_id INTEGER,
    event_uuid TEXT DEFAULT '',
    team_id INTEGER,
    host_profile_id INTEGER,
    name TEXT DEFAULT '',
    color TEXT DEFAULT '',
    status TEXT NOT NULL DEFAULT 'opened',
    contacts TEXT DEFAULT '[]',
    start_timestamp TEXT NOT NULL,
    end_timestamp TEXT NOT NULL,
    start_buffer_timestamp TEXT,
    end_buffer_timestamp TEXT,
    host_workspace TEXT DEFAULT '',
    host_timezone TEXT DEFAULT 'UTC',
    host_profiles TEXT DEFAULT '[]',
    invitee TEXT DEFAULT '{}',
    scheduled_event_notifications TEXT DEFAULT '[]',
    conference_links TEXT DEFAULT '[]',
    ical_uid TEXT DEFAULT '',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS integration_scheduled_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL,
    vendor TEXT NOT NULL,
    calendar_integration_id INTEGER NOT NULL,
    team_id INTEGER,
    host_profile_id INTEGER,
    name TEXT DEFAULT '',
    status TEXT NOT NULL DEFAULT 'confirmed',
    start_timestamp TEXT NOT NULL,
    end_timestamp TEXT NOT NULL,
    start_buffer_timestamp TEXT,
    end_buffer_timestamp TEXT,
    ical_uid TEXT DEFAULT '',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS scheduled_event_bodies (
    uuid TEXT PRIMARY KEY,
    body TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid TEXT NOT NULL UNIQUE,
    team_workspace TEXT NOT NULL,
    name TEXT DEFAULT '',
    color TEXT DEFAULT '',
    contacts TEXT DEFAULT '[]',
    buffer_before_minutes INTEGER DEFAULT 0,
    buffer_after_minutes INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS integrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    vendor TEXT NOT NULL,
    profile_id INTEGER NOT NULL,
    email TEXT DEFAULT '',
    access_token TEXT DEFAULT '',
    refresh_token TEXT DEFAULT ''
);

CREATE TABLE IF NOT EXISTS calendar_integrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    vendor TEXT NOT NULL,
    integration_id INTEGER NOT NULL,
    profile_id INTEGER NOT NULL,
    name TEXT DEFAULT '',
    calendar_id TEXT DEFAULT 'primary',
    outbound_write_sync INTEGER DEFAULT 0
);
"""

MIGRATIONS = [
    # Migration 1: Indexes for conflict lookups
    [
        "CREATE INDEX IF NOT EXISTS idx_scheduled_events_event_time ON scheduled_events(event_id, start_timestamp, end_timestamp)",
        "CREATE INDEX IF NOT EXISTS idx_integration_events_time ON integration_scheduled_events(vendor, calendar_integration_id, start_timestamp, end_timestamp)",
    ],
]

# Ways an existing record, buffers included, can overlap the window (:ws, :we).
_OVERLAP_CONDITION = """(
    (start_timestamp >= :ws AND end_timestamp <= :we)
    OR (start_timestamp <= :ws AND end_timestamp >= :we)
    OR (start_buffer_timestamp <= :ws AND end_buffer_timestamp >= :we)
    OR (start_buffer_timestamp BETWEEN :ws AND :we)
    OR (end_buffer_timestamp BETWEEN :ws AND :we)
    OR (start_timestamp BETWEEN :ws AND :we)
    OR (end_timestamp BETWEEN :ws AND :we)
)"""

_WINDOW_CONDITION = """(
    (start_timestamp >= :since AND end_timestamp <= :until)
    OR (start_buffer_timestamp >= :since AND end_buffer_timestamp <= :until)
)"""


def to_db_timestamp(value: datetime | None) -> str | None:
    """UTC, second precision, so string order equals time order."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def from_db_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


class Database:
    def __init__(self, db_path: str | Path = "bookingcore.db"):
        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(DB_SCHEMA)
        self._run_migrations()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def _run_migrations(self) -> None:
        """Run ALTER TABLE migrations for existing databases."""
        for migration_stmts in MIGRATIONS:
            for stmt in migration_stmts:
                try:
                    self._conn.execute(stmt)
                except sqlite3.OperationalError:
                    pass  # Already applied
        self._conn.commit()

    @property
    def conn(self) -> sqlite3.Connection:
        if not self._conn:
            self.connect()
        return self._conn

    # --- Scheduled events (native bookings) ---

    def _insert_scheduled_event(self, scheduled_event: ScheduledEvent) -> int:
        main_host = scheduled_event.host_profiles[0].profile_id if scheduled_event.host_profiles else None
        cursor = self.conn.execute(
            """INSERT INTO scheduled_events
            (uuid, event_id, event_uuid, team_id, host_profile_id, name, color, status,
             contacts, start_timestamp, end_timestamp, start_buffer_timestamp,
             end_buffer_timestamp, host_workspace, host_timezone, host_profiles, invitee,
             scheduled_event_notifications, conference_links, ical_uid, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                scheduled_event.uuid,
                scheduled_event.event_id,
                scheduled_event.event_uuid,
                scheduled_event.team_id,
                main_host,
                scheduled_event.name,
                scheduled_event.color,
                scheduled_event.status.value,
                json.dumps([{"type": c.type.value, "value": c.value} for c in scheduled_event.contacts]),
                to_db_timestamp(scheduled_event.scheduled_time.start_timestamp),
                to_db_timestamp(scheduled_event.scheduled_time.end_timestamp),
                to_db_timestamp(scheduled_event.scheduled_buffer_time.start_buffer_timestamp),
                to_db_timestamp(scheduled_event.scheduled_buffer_time.end_buffer_timestamp),
                scheduled_event.host.workspace,
                scheduled_event.host.timezone,
                json.dumps([asdict(p) for p in scheduled_event.host_profiles]),
                json.dumps(asdict(scheduled_event.invitee)),
                json.dumps([_notification_to_dict(n) for n in scheduled_event.scheduled_event_notifications]),
                json.dumps([_conference_link_to_dict(link) for link in scheduled_event.conference_links]),
                scheduled_event.ical_uid,
                to_db_timestamp(scheduled_event.created_at),
            ),
        )
        return cursor.lastrowid

    def save_scheduled_event(self, scheduled_event: ScheduledEvent) -> ScheduledEvent:
        """Insert without a conflict check."""
        with self._lock:
            scheduled_event.id = self._insert_scheduled_event(scheduled_event)
            self.conn.commit()
        return scheduled_event

    def insert_scheduled_event_if_free(
        self, scheduled_event: ScheduledEvent, window_start: datetime, window_end: datetime
    ) -> bool:
        """Atomically re-check for conflicts and insert. False if the window was taken."""
        with self._lock:
            try:
                self.conn.execute("BEGIN EXCLUSIVE")
                row = self._find_native_conflict_row(window_start, window_end, scheduled_event.event_id)
                if row is not None:
                    self.conn.execute("ROLLBACK")
                    return False
                scheduled_event.id = self._insert_scheduled_event(scheduled_event)
                self.conn.execute("COMMIT")
                return True
            except Exception:
                if self.conn.in_transaction:
                    self.conn.execute("ROLLBACK")
                raise

    def _find_native_conflict_row(
        self, window_start: datetime, window_end: datetime, event_id: int | None
    ) -> sqlite3.Row | None:
        return self.conn.execute(
            f"""SELECT * FROM scheduled_events
            WHERE event_id IS :event_id AND status != :canceled AND {_OVERLAP_CONDITION}
            ORDER BY start_timestamp LIMIT 1""",
            {
                "event_id": event_id,
                "canceled": ScheduledStatus.CANCELED.value,
                "ws": to_db_timestamp(window_start),
                "we": to_db_timestamp(window_end),
            },
        ).fetchone()

    def find_scheduled_event_conflict(
        self, window_start: datetime, window_end: datetime, event_id: int | None
    ) -> ScheduledEvent | None:
        """First non-canceled booking of the same event overlapping the window."""
        row = self._find_native_conflict_row(window_start, window_end, event_id)
        return self._row_to_scheduled_event(row) if row else None

    def get_scheduled_event_by_uuid(self, scheduled_event_uuid: str) -> ScheduledEvent | None:
        row = self.conn.execute(
            "SELECT * FROM scheduled_events WHERE uuid = ?", (scheduled_event_uuid,)
        ).fetchone()
        if not row:
            return None
        return self._row_to_scheduled_event(row)

    def update_scheduled_event_status(self, scheduled_event_id: int, status: ScheduledStatus) -> bool:
        with self._lock:
            cursor = self.conn.execute(
                "UPDATE scheduled_events SET status = ? WHERE id = ?",
                (status.value, scheduled_event_id),
            )
            self.conn.commit()
            return cursor.rowcount > 0

    def search_scheduled_events(self, option: ScheduledEventSearchOption) -> list[ScheduledEvent]:
        conditions, params = _search_conditions(option)
        query = f"SELECT * FROM scheduled_events WHERE {' AND '.join(conditions)}"
        query += _order_and_page(option, params)
        rows = self.conn.execute(query, params).fetchall()
        return [self._row_to_scheduled_event(row) for row in rows]

    def _row_to_scheduled_event(self, row: sqlite3.Row) -> ScheduledEvent:
        return ScheduledEvent(
            id=row["id"],
            uuid=row["uuid"],
            event_id=row["event_id"],
            event_uuid=row["event_uuid"] or "",
            team_id=row["team_id"],
            name=row["name"] or "",
            color=row["color"] or "",
            status=ScheduledStatus(row["status"]),
            contacts=_contacts_from_json(row["contacts"]),
            scheduled_time=ScheduledTimeset(
                start_timestamp=from_db_timestamp(row["start_timestamp"]),
                end_timestamp=from_db_timestamp(row["end_timestamp"]),
            ),
            scheduled_buffer_time=ScheduledBufferTime(
                start_buffer_timestamp=from_db_timestamp(row["start_buffer_timestamp"]),
                end_buffer_timestamp=from_db_timestamp(row["end_buffer_timestamp"]),
            ),
            host=Host(workspace=row["host_workspace"] or "", timezone=row["host_timezone"] or "UTC"),
            host_profiles=[HostProfile(**p) for p in json.loads(row["host_profiles"] or "[]")],
            invitee=Invitee(**json.loads(row["invitee"] or "{}")),
            scheduled_event_notifications=[
                ScheduledEventNotification(
                    notification_target=NotificationTarget(n["notification_target"]),
                    notification_type=NotificationType(n["notification_type"]),
                    reminder_type=n["reminder_type"],
                    reminder_value=n["reminder_value"],
                    remind_at=n.get("remind_at", ""),
                )
                for n in json.loads(row["scheduled_event_notifications"] or "[]")
            ],
            conference_links=[
                ConferenceLink(
                    type=IntegrationVendor(link["type"]),
                    service_name=link["service_name"],
                    link=link["link"],
                )
                for link in json.loads(row["conference_links"] or "[]")
            ],
            ical_uid=row["ical_uid"] or "",
            created_at=from_db_timestamp(row["created_at"]),
        )

    # --- Mirrored vendor events ---

    def save_mirrored_scheduled_event(self, mirrored: VendorMirroredScheduledEvent) -> VendorMirroredScheduledEvent:
        """Written by the provider sync processes; used here mostly by tests and tooling."""
        main_host = mirrored.host_profiles[0].profile_id if mirrored.host_profiles else None
        with self._lock:
            cursor = self.conn.execute(
                """INSERT INTO integration_scheduled_events
                (uuid, vendor, calendar_integration_id, team_id, host_profile_id, name, status,
                 start_timestamp, end_timestamp, start_buffer_timestamp, end_buffer_timestamp,
                 ical_uid, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    mirrored.uuid,
                    mirrored.vendor.value,
                    mirrored.calendar_integration_id,
                    mirrored.team_id,
                    main_host,
                    mirrored.name,
                    mirrored.status.value,
                    to_db_timestamp(mirrored.scheduled_time.start_timestamp),
                    to_db_timestamp(mirrored.scheduled_time.end_timestamp),
                    to_db_timestamp(mirrored.scheduled_buffer_time.start_buffer_timestamp),
                    to_db_timestamp(mirrored.scheduled_buffer_time.end_buffer_timestamp),
                    mirrored.ical_uid,
                    to_db_timestamp(mirrored.created_at),
                ),
            )
            self.conn.commit()
        mirrored.id = cursor.lastrowid
        return mirrored

    def find_mirrored_conflict(
        self,
        vendor: IntegrationVendor,
        calendar_integration_id: int,
        window_start: datetime,
        window_end: datetime,
    ) -> VendorMirroredScheduledEvent | None:
        row = self.conn.execute(
            f"""SELECT * FROM integration_scheduled_events
            WHERE vendor = :vendor AND calendar_integration_id = :calendar_integration_id
            AND status != :canceled AND {_OVERLAP_CONDITION}
            ORDER BY start_timestamp LIMIT 1""",
            {
                "vendor": vendor.value,
                "calendar_integration_id": calendar_integration_id,
                "canceled": ScheduledStatus.CANCELED.value,
                "ws": to_db_timestamp(window_start),
                "we": to_db_timestamp(window_end),
            },
        ).fetchone()
        return self._row_to_mirrored(row) if row else None

    def search_mirrored_scheduled_events(
        self, vendor: IntegrationVendor, option: ScheduledEventSearchOption
    ) -> list[VendorMirroredScheduledEvent]:
        # Mirrored events carry no event definition, so event_uuid does not apply
        conditions, params = _search_conditions(option, with_event_uuid=False)
        conditions.append("vendor = :vendor")
        params["vendor"] = vendor.value
        query = f"SELECT * FROM integration_scheduled_events WHERE {' AND '.join(conditions)}"
        query += _order_and_page(option, params)
        rows = self.conn.execute(query, params).fetchall()
        return [self._row_to_mirrored(row) for row in rows]

    def _row_to_mirrored(self, row: sqlite3.Row) -> VendorMirroredScheduledEvent:
        host_profile_id = row["host_profile_id"]
        return VendorMirroredScheduledEvent(
            id=row["id"],
            uuid=row["uuid"],
            vendor=IntegrationVendor(row["vendor"]),
            calendar_integration_id=row["calendar_integration_id"],
            team_id=row["team_id"],
            host_profiles=[HostProfile(profile_id=host_profile_id)] if host_profile_id is not None else [],
            name=row["name"] or "",
            status=ScheduledStatus(row["status"]),
            scheduled_time=ScheduledTimeset(
                start_timestamp=from_db_timestamp(row["start_timestamp"]),
                end_timestamp=from_db_timestamp(row["end_timestamp"]),
            ),
            scheduled_buffer_time=ScheduledBufferTime(
                start_buffer_timestamp=from_db_timestamp(row["start_buffer_timestamp"]),
                end_buffer_timestamp=from_db_timestamp(row["end_buffer_timestamp"]),
            ),
            ical_uid=row["ical_uid"] or "",
            created_at=from_db_timestamp(row["created_at"]),
        )

    # --- Scheduled event bodies (invitee answers, notification info) ---

    def save_scheduled_event_body(self, scheduled_event_uuid: str, body: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self.conn.execute(
                "INSERT OR REPLACE INTO scheduled_event_bodies (uuid, body) VALUES (?, ?)",
                (scheduled_event_uuid, json.dumps(body)),
            )
            self.conn.commit()
        return body

    def get_scheduled_event_body(self, scheduled_event_uuid: str) -> dict[str, Any] | None:
        row = self.conn.execute(
            "SELECT body FROM scheduled_event_bodies WHERE uuid = ?", (scheduled_event_uuid,)
        ).fetchone()
        if not row:
            return None
        return json.loads(row["body"])

    # --- Event definitions ---

    def save_event(self, event: EventDefinition) -> EventDefinition:
        with self._lock:
            cursor = self.conn.execute(
                """INSERT OR REPLACE INTO events
                (id, uuid, team_workspace, name, color, contacts,
                 buffer_before_minutes, buffer_after_minutes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    event.id,
                    event.uuid,
                    event.team_workspace,
                    event.name,
                    event.color,
                    json.dumps([{"type": c.type.value, "value": c.value} for c in event.contacts]),
                    event.buffer_before_minutes,
                    event.buffer_after_minutes,
                ),
            )
            self.conn.commit()
        event.id = cursor.lastrowid
        return event

    def get_event_by_workspace_and_uuid(self, team_workspace: str, event_uuid: str) -> EventDefinition | None:
        row = self.conn.execute(
            "SELECT * FROM events WHERE team_workspace = ? AND uuid = ?",
            (team_workspace, event_uuid),
        ).fetchone()
        if not row:
            return None
        return EventDefinition(
            id=row["id"],
            uuid=row["uuid"],
            team_workspace=row["team_workspace"],
            name=row["name"] or "",
            color=row["color"] or "",
            contacts=_contacts_from_json(row["contacts"]),
            buffer_before_minutes=row["buffer_before_minutes"] or 0,
            buffer_after_minutes=row["buffer_after_minutes"] or 0,
        )

    # --- Integrations ---

    def save_integration(self, integration: Integration) -> Integration:
        with self._lock:
            cursor = self.conn.execute(
                """INSERT OR REPLACE INTO integrations
                (id, vendor, profile_id, email, access_token, refresh_token)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    integration.id,
                    integration.vendor.value,
                    integration.profile_id,
                    integration.email,
                    integration.access_token,
                    integration.refresh_token,
                ),
            )
            self.conn.commit()
        integration.id = cursor.lastrowid
        return integration

    def update_integration_tokens(self, integration_id: int, access_token: str, refresh_token: str) -> None:
        with self._lock:
            self.conn.execute(
                "UPDATE integrations SET access_token = ?, refresh_token = ? WHERE id = ?",
                (access_token, refresh_token, integration_id),
            )
            self.conn.commit()

    def get_integration(self, integration_id: int) -> Integration | None:
        row = self.conn.execute(
            "SELECT * FROM integrations WHERE id = ?", (integration_id,)
        ).fetchone()
        return _row_to_integration(row) if row else None

    def find_integration(self, vendor: IntegrationVendor, profile_ids: list[int]) -> Integration | None:
        """First integration of the vendor owned by any of the given profiles."""
        if not profile_ids:
            return None
        placeholders = ", ".join("?" for _ in profile_ids)
        row = self.conn.execute(
            f"SELECT * FROM integrations WHERE vendor = ? AND profile_id IN ({placeholders}) ORDER BY id LIMIT 1",
            (vendor.value, *profile_ids),
        ).fetchone()
        return _row_to_integration(row) if row else None

    def save_calendar_integration(self, calendar_integration: CalendarIntegration) -> CalendarIntegration:
        with self._lock:
            cursor = self.conn.execute(
                """INSERT OR REPLACE INTO calendar_integrations
                (id, vendor, integration_id, profile_id, name, calendar_id, outbound_write_sync)
                VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    calendar_integration.id,
                    calendar_integration.vendor.value,
                    calendar_integration.integration_id,
                    calendar_integration.profile_id,
                    calendar_integration.name,
                    calendar_integration.calendar_id,
                    int(calendar_integration.outbound_write_sync),
                ),
            )
            self.conn.commit()
        calendar_integration.id = cursor.lastrowid
        return calendar_integration

    def find_outbound_calendar_integration(
        self, vendor: IntegrationVendor, profile_id: int
    ) -> CalendarIntegration | None:
        row = self.conn.execute(
            """SELECT * FROM calendar_integrations
            WHERE vendor = ? AND profile_id = ? AND outbound_write_sync = 1
            ORDER BY id LIMIT 1""",
            (vendor.value, profile_id),
        ).fetchone()
        if not row:
            return None
        return CalendarIntegration(
            id=row["id"],
            vendor=IntegrationVendor(row["vendor"]),
            integration_id=row["integration_id"],
            profile_id=row["profile_id"],
            name=row["name"] or "",
            calendar_id=row["calendar_id"] or "primary",
            outbound_write_sync=bool(row["outbound_write_sync"]),
        )


def _search_conditions(
    option: ScheduledEventSearchOption, with_event_uuid: bool = True
) -> tuple[list[str], dict[str, Any]]:
    conditions: list[str] = []
    params: dict[str, Any] = {}
    if option.since is not None and option.until is not None:
        conditions.append(_WINDOW_CONDITION)
        params["since"] = to_db_timestamp(option.since)
        params["until"] = to_db_timestamp(option.until)

    if option.status is not None:
        conditions.append("status = :status")
        params["status"] = option.status.value
    else:
        statuses = UPCOMING_STATUSES if option.status_group == "upcoming" else PAST_STATUSES
        names = []
        for i, status in enumerate(statuses):
            params[f"status_{i}"] = status.value
            names.append(f":status_{i}")
        conditions.append(f"status IN ({', '.join(names)})")

    if option.team_id is not None:
        conditions.append("team_id = :team_id")
        params["team_id"] = option.team_id
    if option.host_profile_id is not None:
        conditions.append("host_profile_id = :host_profile_id")
        params["host_profile_id"] = option.host_profile_id
    if with_event_uuid and option.event_uuid:
        conditions.append("event_uuid = :event_uuid")
        params["event_uuid"] = option.event_uuid
    return conditions, params


def _order_and_page(option: ScheduledEventSearchOption, params: dict[str, Any]) -> str:
    clause = ""
    if option.order_by_start:
        direction = "DESC" if option.order_by_start.upper() == "DESC" else "ASC"
        clause += f" ORDER BY start_timestamp {direction}"
    if option.take:
        params["take"] = option.take
        params["skip"] = (option.page or 0) * option.take
        clause += " LIMIT :take OFFSET :skip"
    return clause


def _contacts_from_json(raw: str | None) -> list[Contact]:
    return [Contact(type=ContactType(c["type"]), value=c.get("value", "")) for c in json.loads(raw or "[]")]


def _notification_to_dict(notification: ScheduledEventNotification) -> dict[str, Any]:
    return {
        "notification_target": notification.notification_target.value,
        "notification_type": notification.notification_type.value,
        "reminder_type": notification.reminder_type,
        "reminder_value": notification.reminder_value,
        "remind_at": notification.remind_at,
    }


def _conference_link_to_dict(link: ConferenceLink) -> dict[str, Any]:
    return {"type": link.type.value, "service_name": link.service_name, "link": link.link}


def _row_to_integration(row: sqlite3.Row) -> Integration:
    return Integration(
        id=row["id"],
        vendor=IntegrationVendor(row["vendor"]),
        profile_id=row["profile_id"],
        email=row["email"] or "",
        access_token=row["access_token"] or "",
        refresh_token=row["refresh_token"] or "",
    )
