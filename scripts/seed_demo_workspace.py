"""
Seed a demo workspace with members, a project, tasks and documents.

Writes straight to DATABASE_URL and prints a bearer token for each member,
ready for scripts/show_trust_ledger.py.
"""
import asyncio
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.database import async_session_maker, init_db
from src.kernel.identity.jwt import JWTManager
from src.kernel.models import (
    MemberRole,
    User,
    UserRole,
    Workspace,
    WorkspaceDocument,
    WorkspaceMember,
    WorkspaceProject,
    WorkspaceTask,
)


def ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


async def main():
    await init_db()

    async with async_session_maker() as session:
        founder = User(id=uuid.uuid4(), email=f"founder-{uuid.uuid4().hex[:6]}@example.com",
                       name="Demo Founder", role=UserRole.FOUNDER.value)
        mentor = User(id=uuid.uuid4(), email=f"mentor-{uuid.uuid4().hex[:6]}@example.com",
                      name="Demo Mentor", role=UserRole.MENTOR.value)
        session.add_all([founder, mentor])

        workspace = Workspace(id=uuid.uuid4(), name="Demo Startup", owner_id=founder.id)
        project = WorkspaceProject(id=uuid.uuid4(), workspace_id=workspace.id,
                                   name="MVP Launch", created_by=founder.id)
        session.add_all([
            workspace,
            project,
            WorkspaceMember(workspace_id=workspace.id, user_id=founder.id, role=MemberRole.OWNER.value),
            WorkspaceMember(workspace_id=workspace.id, user_id=mentor.id, role=MemberRole.MEMBER.value),
        ])

        # (title, status, assignee, project, days ago)
        tasks = [
            ("Define pricing", "completed", founder, None, 6),
            ("Investor shortlist", "in_progress", mentor, None, 3),
            ("Hire first engineer", "cancelled", founder, None, 2),
            ("Build signup flow", "completed", founder, project, 5),
            ("Landing page copy", "review", mentor, project, 1),
            ("Payment integration", "todo", founder, project, 0),
        ]
        for title, status, assignee, scope, days in tasks:
            session.add(WorkspaceTask(
                workspace_id=workspace.id,
                project_id=scope.id if scope else None,
                title=title,
                status=status,
                assigned_to=assignee.id,
                created_by=founder.id,
                created_at=ago(days + 1),
                updated_at=ago(days),
            ))

        # (title, doc_type, status, creator, project, days ago)
        documents = [
            ("Seed deck", "pitch_deck", "approved", founder, None, 4),
            ("Market analysis", "document", None, mentor, None, 2),
            ("MVP spec", "document", "rejected", founder, project, 3),
        ]
        for title, doc_type, status, creator, scope, days in documents:
            session.add(WorkspaceDocument(
                workspace_id=workspace.id,
                project_id=scope.id if scope else None,
                title=title,
                doc_type=doc_type,
                status=status,
                created_by=creator.id,
                created_at=ago(days + 1),
                updated_at=ago(days),
            ))

        await session.commit()

    jwt_manager = JWTManager(access_token_expire_minutes=24 * 60)
    print(f"Workspace: {workspace.id}")
    print(f"Project:   {project.id}")
    for user in (founder, mentor):
        token, _, _ = jwt_manager.create_access_token(user.id, user.email, user.role)
        print(f"\n{user.name} ({user.email})\n  token: {token}")


if __name__ == "__main__":
    asyncio.run(main())
