"""
Name and identifier resolution for Kimai entities.

Lookups are best-effort: a failed or missing record resolves to a
placeholder so that one bad reference never aborts a report.
"""

import logging

from pydantic import ValidationError

from core.config import NOT_AVAILABLE, UNKNOWN_ACTIVITY, UNKNOWN_CUSTOMER
from core.kimai_client import KimaiClient, KimaiError
from models.timesheets import (
    ActivityDescriptor,
    ActivityRecord,
    CustomerRecord,
    EntityKind,
    ProjectRecord,
    UserDescriptor,
    UserRecord,
)

logger = logging.getLogger(__name__)

UNKNOWN_USER = UserDescriptor(display_name=NOT_AVAILABLE, login_name=NOT_AVAILABLE)
UNKNOWN_ACTIVITY_DESCRIPTOR = ActivityDescriptor(name=UNKNOWN_ACTIVITY, description=NOT_AVAILABLE)


def build_name_index(records: list[CustomerRecord | ProjectRecord]) -> dict[str, int]:
    """Map display name -> id. The first record listed wins on duplicate names."""
    index: dict[str, int] = {}
    for record in records:
        if record.name not in index:
            index[record.name] = record.id
    return index


class EntityResolver:
    """
    Resolves names to ids and ids to descriptors for one report run.

    Results (including failures) are cached per id for the lifetime of the
    instance, so entries sharing a project, user or activity cost one
    remote lookup each.
    """

    def __init__(self, client: KimaiClient):
        self.client = client
        self._projects: dict[int, ProjectRecord | None] = {}
        self._customer_names: dict[int, str] = {}
        self._users: dict[int, UserDescriptor] = {}
        self._activities: dict[int, ActivityDescriptor] = {}

    # -------------------------------------------------------------------------
    # Name -> id
    # -------------------------------------------------------------------------

    async def resolve_all_customers(self) -> dict[str, int]:
        return await self._resolve_collection("customers", self.client.get_customers, CustomerRecord)

    async def resolve_all_projects(self) -> dict[str, int]:
        return await self._resolve_collection("projects", self.client.get_projects, ProjectRecord)

    async def resolve_all(self, kind: EntityKind) -> dict[str, int]:
        if kind is EntityKind.CUSTOMER:
            return await self.resolve_all_customers()
        return await self.resolve_all_projects()

    async def _resolve_collection(self, label: str, fetch, model) -> dict[str, int]:
        try:
            data = await fetch()
        except KimaiError as e:
            logger.error(f"Error fetching {label}: {e.message}")
            return {}

        if not isinstance(data, list):
            logger.error(f"Unexpected {label} payload: expected a list")
            return {}

        records = []
        for item in data:
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed entry in {label}: {e}")

        index = build_name_index(records)
        logger.info(f"Loaded {len(index)} {label}")
        return index

    # -------------------------------------------------------------------------
    # Id -> descriptor
    # -------------------------------------------------------------------------

    async def _project_record(self, project_id: int) -> ProjectRecord | None:
        if project_id not in self._projects:
            try:
                data = await self.client.get_project(project_id)
                self._projects[project_id] = ProjectRecord.model_validate(data)
            except (KimaiError, ValidationError) as e:
                logger.error(f"Error fetching project {project_id}: {e}")
                self._projects[project_id] = None
        return self._projects[project_id]

    async def project_name(self, project_id: int | None) -> str:
        if project_id is None:
            return NOT_AVAILABLE
        project = await self._project_record(project_id)
        return project.name if project else NOT_AVAILABLE

    async def customer_name(self, customer_id: int) -> str:
        if customer_id not in self._customer_names:
            try:
                data = await self.client.get_customer(customer_id)
                name = CustomerRecord.model_validate(data).name
            except (KimaiError, ValidationError) as e:
                logger.error(f"Error fetching customer {customer_id}: {e}")
                name = UNKNOWN_CUSTOMER
            self._customer_names[customer_id] = name
        return self._customer_names[customer_id]

    async def customer_name_for_project(self, project_id: int | None) -> str:
        """Resolve project -> customer id -> customer name."""
        if project_id is None:
            return UNKNOWN_CUSTOMER
        project = await self._project_record(project_id)
        if project is None or project.customer is None:
            return UNKNOWN_CUSTOMER
        return await self.customer_name(project.customer)

    async def user_descriptor(self, user_id: int | None) -> UserDescriptor:
        if user_id is None:
            return UNKNOWN_USER
        if user_id not in self._users:
            try:
                user = UserRecord.model_validate(await self.client.get_user(user_id))
                descriptor = UserDescriptor(display_name=user.display_name, login_name=user.username)
            except (KimaiError, ValidationError) as e:
                logger.error(f"Error fetching user {user_id}: {e}")
                descriptor = UNKNOWN_USER
            self._users[user_id] = descriptor
        return self._users[user_id]

    async def activity_descriptor(self, activity_id: int | None) -> ActivityDescriptor:
        if activity_id is None:
            return UNKNOWN_ACTIVITY_DESCRIPTOR
        if activity_id not in self._activities:
            try:
                activity = ActivityRecord.model_validate(await self.client.get_activity(activity_id))
                descriptor = ActivityDescriptor(
                    name=activity.name,
                    description=activity.comment or NOT_AVAILABLE,
                )
            except (KimaiError, ValidationError) as e:
                logger.error(f"Error fetching activity {activity_id}: {e}")
                descriptor = UNKNOWN_ACTIVITY_DESCRIPTOR
            self._activities[activity_id] = descriptor
        return self._activities[activity_id]
