import aiosqlite

from subguard.agents.schemas import AgentStatus, AgentStatusUpdate


class AgentStatusRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_name(self, name: str) -> AgentStatus | None:
        cursor = await self._db.execute(
            "SELECT name, status, last_run, observations FROM agent_statuses WHERE name = ?",
            (name,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return AgentStatus.model_validate(dict(row))

    async def list_all(self) -> list[AgentStatus]:
        cursor = await self._db.execute(
            "SELECT name, status, last_run, observations FROM agent_statuses ORDER BY rowid"
        )
        rows = await cursor.fetchall()
        return [AgentStatus.model_validate(dict(row)) for row in rows]

    async def upsert(self, status: AgentStatus) -> None:
        await self._db.execute(
            """
            INSERT INTO agent_statuses (name, status, last_run, observations)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                status = excluded.status,
                last_run = excluded.last_run,
                observations = excluded.observations
            """,
            (status.name, status.status, status.last_run.isoformat(), status.observations),
        )

    async def update(self, name: str, data: AgentStatusUpdate) -> AgentStatus | None:
        changes = data.model_dump(exclude_none=True)
        if not changes:
            return await self.get_by_name(name)

        if "last_run" in changes:
            changes["last_run"] = changes["last_run"].isoformat()
        assignments = ", ".join(f"{column} = ?" for column in changes)
        cursor = await self._db.execute(
            f"UPDATE agent_statuses SET {assignments} WHERE name = ?",
            [*changes.values(), name],
        )
        if cursor.rowcount == 0:
            return None
        return await self.get_by_name(name)
