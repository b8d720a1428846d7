"""Memoization-directory guard.

Memoized results are only valid under the global config that produced
them.  The first run against a fresh ``MemoDir`` copies its config file
in as ``memo.config``; every later run must agree with that snapshot on
:data:`~shellfish.core.global_config.CACHE_FIELDS` or it is refused.  The
guard never rewrites ``memo.config`` and never clears the directory:
reconciling the two files is left to the operator.

The seed-if-absent step is not atomic.  Two invocations racing on a
fresh directory may both seed it, so first-time initialization must be
serialized by the caller.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from shellfish.core.global_config import GlobalConfig, cache_differences
from shellfish.core.models import MemoStatus
from shellfish.exceptions import MemoError, MemoMismatchError
from shellfish.utils.log import get_logger

MEMO_CONFIG_NAME = "memo.config"

log = get_logger(__name__)


def memo_config_path(memo_dir: str | Path) -> Path:
    return Path(memo_dir) / MEMO_CONFIG_NAME


def check_memo_dir(
    memo_dir: str | Path,
    config_file: str | Path,
    config: GlobalConfig | None = None,
) -> MemoStatus:
    """Seed or validate the snapshot config inside *memo_dir*.

    Parameters
    ----------
    memo_dir:
        The ``MemoDir`` of the current global config.
    config_file:
        The file the current global config was loaded from.  It is copied
        verbatim on first use.
    config:
        The already-parsed current config.  Loaded from *config_file*
        when omitted.

    Raises
    ------
    MemoError
        If *memo_dir* is not an existing directory or cannot be written.
    MemoMismatchError
        If ``memo.config`` differs from the current config on a
        cache-relevant field.
    ConfigError
        If ``memo.config`` or *config_file* cannot be parsed.
    """
    memo_dir = Path(memo_dir)
    config_file = Path(config_file)
    if not memo_dir.is_dir():
        raise MemoError(
            f"The MemoDir '{memo_dir}' does not exist or is not a directory.",
            hint=f"Create it with: mkdir -p {memo_dir}",
        )

    memo_file = memo_config_path(memo_dir)
    if not memo_file.exists():
        try:
            shutil.copyfile(config_file, memo_file)
        except OSError as exc:
            raise MemoError(
                f"Could not copy '{config_file}' into the MemoDir as "
                f"'{memo_file}': {exc.strerror or exc}",
            ) from exc
        log.info("seeded %s from %s", memo_file, config_file)
        return MemoStatus.SEEDED

    if config is None:
        config = GlobalConfig.from_file(config_file)
    memo_config = GlobalConfig.from_file(memo_file)

    differing = cache_differences(config, memo_config)
    if differing:
        raise MemoMismatchError(
            f"The variables in the config file '{config_file}' do not match "
            f"the variables used when creating the MemoDir '{memo_dir}' "
            f"(differing: {', '.join(differing)}). These variables can be "
            f"compared by inspecting '{config_file}' and '{memo_file}'.",
            hint=(
                "Reconcile the two files by hand, or point MemoDir at a new "
                "directory. Memoized results are never migrated automatically."
            ),
        )
    log.debug("memo snapshot %s matches %s", memo_file, config_file)
    return MemoStatus.VALIDATED
