class RepoError(Exception):
    """
    Base class for every failure raised by a repository.
    """


class StartupError(RepoError):
    """
    The repository could not be brought up: the connection pool could not be
    built or the base table could not be created. The process must not serve.
    """


class StorageUnavailable(RepoError):
    """
    No connection could be obtained within the pool's wait policy, or the
    database file could not be opened. Safe to retry.
    """


class WriteConflict(RepoError):
    """
    A write violated a uniqueness or foreign-key constraint. The whole
    operation was rolled back. Safe to retry.
    """
