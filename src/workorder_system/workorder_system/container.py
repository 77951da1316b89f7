from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .accounts.mysql_admin_repository import MySQLAdminRepository, MySQLAdminRoleRepository
from .accounts.service import AccountService
from .database.connection import DBConfig, DatabaseConnection
from .identity.mysql_identity_repository import MySQLIdentityRepository
from .identity.service import AuthService, IdentityService
from .notifications.mysql_mail_repository import MySQLMailOutboxRepository
from .notifications.service import NotificationService
from .qr.transition import WorkTransitionService
from .realtime.feed import ChangeFeed
from .storage.local_storage import LocalFileStorage
from .videos.mysql_video_repository import MySQLVideoRepository
from .videos.service import VideoService
from .workers.mysql_group_repository import MySQLGroupRepository, MySQLRankRepository
from .workers.mysql_skill_repository import MySQLSkillRepository
from .workers.mysql_worker_repository import MySQLWorkerRepository
from .workers.service import GroupService, WorkerService
from .works.cache import WorkListCache
from .works.mysql_work_repository import MySQLWorkRepository
from .works.proceeds import ProceedsReportService
from .works.service import WorkService


@dataclass(frozen=True)
class Container:
    feed: ChangeFeed
    storage: LocalFileStorage

    identity_service: IdentityService
    auth_service: AuthService
    account_service: AccountService
    worker_service: WorkerService
    group_service: GroupService
    work_service: WorkService
    transition_service: WorkTransitionService
    proceeds_service: ProceedsReportService
    notification_service: NotificationService
    video_service: VideoService

    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    upload_folder: str,
    mail_from: str,
    base_url: str = "",
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    feed = ChangeFeed()
    storage = LocalFileStorage(upload_folder, secret_key=secret_key)

    identities_repo = MySQLIdentityRepository(conn)
    admins_repo = MySQLAdminRepository(conn)
    admin_roles_repo = MySQLAdminRoleRepository(conn)
    workers_repo = MySQLWorkerRepository(conn, feed=feed)
    skills_repo = MySQLSkillRepository(conn)
    groups_repo = MySQLGroupRepository(conn)
    ranks_repo = MySQLRankRepository(conn)
    works_repo = MySQLWorkRepository(conn, feed=feed)
    mails_repo = MySQLMailOutboxRepository(conn)
    videos_repo = MySQLVideoRepository(conn)

    identity_service = IdentityService(identities_repo, admins_repo, workers_repo, secret_key=secret_key)
    notification_service = NotificationService(mails_repo, workers_repo, from_address=mail_from, base_url=base_url)
    cache = WorkListCache(lambda: works_repo.list_live(), feed)

    return Container(
        feed=feed,
        storage=storage,
        identity_service=identity_service,
        auth_service=AuthService(identities_repo, admins_repo, admin_roles_repo, workers_repo),
        account_service=AccountService(admins_repo, admin_roles_repo, identity_service, notification_service),
        worker_service=WorkerService(
            workers_repo,
            skills_repo,
            ranks_repo,
            works_repo,
            identity_service,
            notification_service,
        ),
        group_service=GroupService(groups_repo, ranks_repo),
        work_service=WorkService(works_repo, workers_repo, cache=cache),
        transition_service=WorkTransitionService(works_repo),
        proceeds_service=ProceedsReportService(works_repo),
        notification_service=notification_service,
        video_service=VideoService(videos_repo, storage),
        conn=conn,
    )
