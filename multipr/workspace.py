"""Workspace: one repository's buckets, config and git access wired together."""

from __future__ import annotations

from pathlib import Path

from multipr.buckets import BucketStore
from multipr.config import MultiPRConfig
from multipr.constants import CONFIG_FILE, EVENTS_FILE, STATE_DIR, STATE_FILE
from multipr.events import ChangeNotifier
from multipr.git.hosting import HostingAdapter, RepositoryContext, adapter_for
from multipr.git.ops import GitOps, open_repository
from multipr.logging import get_logger, setup_logging
from multipr.orchestrator import WorkflowOrchestrator
from multipr.reporter import OutcomeReport
from multipr.state import StateStore
from multipr.types import FileRef

logger = get_logger("workspace")


def ensure_state_dir(root: Path) -> Path:
    """Create the state directory and keep git from reporting it as a change."""
    state_dir = root / STATE_DIR
    state_dir.mkdir(parents=True, exist_ok=True)
    gitignore = state_dir / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text("*\n")
    return state_dir


class Workspace:
    """Everything a CLI command needs for one repository.

    The repository context is detected once and handed to the components
    that need it. Buckets are restored from the state file and the pool is
    rebuilt from ``git status`` when the workspace is opened.
    """

    def __init__(
        self,
        git: GitOps,
        config: MultiPRConfig,
        context: RepositoryContext,
        store: BucketStore,
        state: StateStore,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self.git = git
        self.config = config
        self.context = context
        self.store = store
        self.state = state
        self.notifier = notifier

    @classmethod
    def open(
        cls,
        path: str | Path = ".",
        config: MultiPRConfig | None = None,
        log_level: str | None = None,
    ) -> Workspace:
        """Open the workspace for the repository containing ``path``.

        Args:
            path: Any directory inside the working tree
            config: Configuration to use instead of .multipr/config.yaml
            log_level: Console log level overriding the configured one

        Raises:
            GitError: If ``path`` is not inside a git repository
            ConfigurationError: If the config file is invalid
            StateError: If the state file is corrupt
        """
        git = open_repository(path)
        root = git.repo_path
        config = config or MultiPRConfig.load(root / CONFIG_FILE)

        ensure_state_dir(root)
        setup_logging(
            level=log_level or config.logging.level,
            log_dir=root / config.logging.directory,
            json_output=config.logging.json_file,
        )

        notifier = ChangeNotifier(root / EVENTS_FILE)
        workspace = cls(
            git=git,
            config=config,
            context=RepositoryContext.detect(git, config.remote),
            store=BucketStore(notifier=notifier),
            state=StateStore(root / STATE_FILE),
            notifier=notifier,
        )
        workspace.load()
        return workspace

    @property
    def root(self) -> Path:
        return self.git.repo_path

    def load(self) -> None:
        """Restore saved buckets, then rebuild the pool."""
        self.store.restore(self.state.load())
        self.refresh()

    def refresh(self) -> int:
        """Rebuild the unassigned pool from the working tree."""
        count = self.store.reload(self.changed_files())
        logger.debug(f"Pool reloaded with {count} files")
        return count

    def changed_files(self) -> list[FileRef]:
        prefix = f"{STATE_DIR}/"
        return [ref for ref in self.git.list_changed_files() if not ref.path.startswith(prefix)]

    def save(self) -> None:
        self.state.save(self.store.list())

    def host(self) -> HostingAdapter:
        """Hosting adapter for this repository.

        Raises:
            UnsupportedHostError: If the remote is not GitHub or Bitbucket
        """
        return adapter_for(self.context)

    def orchestrator(self) -> WorkflowOrchestrator:
        return WorkflowOrchestrator(self.git, self.host(), self.config, notifier=self.notifier)

    def run(
        self,
        orchestrator: WorkflowOrchestrator,
        use_automation: bool,
        base_branch: str | None = None,
    ) -> OutcomeReport:
        """Process all eligible buckets and update saved state.

        When any bucket succeeded, every bucket is consumed and the pool is
        rebuilt. Otherwise buckets are kept so the run can be retried.
        """
        results = orchestrator.process_all(
            self.store.eligible(),
            default_base_branch=base_branch or self.config.default_base_branch,
            use_automation=use_automation,
        )
        report = OutcomeReport.from_results(results)

        if report.should_clear:
            self.store.clear()
            self.refresh()
        self.save()
        return report
