"""Exceptions raised by the git process layer and the repository loader."""


class LoaderError(Exception):
    """Base exception for repository loading errors.

    Attributes:
        message: Explanation of the error.
        repo_path: Path to the repository, if applicable.
    """

    def __init__(self, message: str, repo_path: str | None = None) -> None:
        """Initialize the LoaderError.

        Args:
            message: Explanation of the error.
            repo_path: Path to the repository.
        """
        self.message = message
        self.repo_path = repo_path

        full_message = f"{message} (repo={repo_path})" if repo_path else message
        super().__init__(full_message)


class ConfigurationError(LoaderError):
    """Raised when no working directory is set or it is not a Git repository."""


class ReentrantLoadError(LoaderError):
    """Raised when a load is requested while another one is in progress."""


class GitProcessError(LoaderError):
    """Raised when a git command cannot be spawned or exits with a failure.

    Attributes:
        returncode: Exit status of the process, None if it never started.
        stderr: Captured standard error output.
    """

    def __init__(
        self,
        message: str,
        repo_path: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        """Initialize the GitProcessError.

        Args:
            message: Explanation of the error.
            repo_path: Path to the repository.
            returncode: Exit status of the git process.
            stderr: Standard error output of the git process.
        """
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, repo_path=repo_path)
