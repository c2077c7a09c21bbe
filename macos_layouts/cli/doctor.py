"""
Environment checks for ``layouts doctor``.

Checks run in dependency order: later Hammerspoon checks are skipped when
an earlier one fails.
"""

import logging
import shutil
from typing import Callable, Iterable, Literal, Optional

import psutil
from pydantic import BaseModel, ConfigDict, Field

from ..config import LayoutsConfig
from ..constants import ExitCode
from ..errors import HammerspoonError, LayoutsError
from ..hammerspoon import HammerspoonClient
from ..models import RuntimeScreen
from ..persistence import LayoutStore, validate_layout_references

logger = logging.getLogger(__name__)

HAMMERSPOON_PROCESS = "Hammerspoon"
IPC_REQUIRE = 'require("hs.ipc")'

# Failing any of these makes the CLI unusable
RUNTIME_CHECKS = ("hs-binary", "hs-running", "hs-ipc")
PERMISSION_CHECKS = ("accessibility",)


class DoctorCheck(BaseModel):
    """One doctor check result."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: Literal["pass", "fail", "warn", "info"]
    message: str
    fix: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class DoctorReport(BaseModel):
    """All checks plus the screens seen, if Hammerspoon answered."""

    checks: list[DoctorCheck] = Field(default_factory=list)
    screens: list[RuntimeScreen] = Field(default_factory=list)

    @property
    def exit_code(self) -> int:
        failed = {check.name for check in self.checks if check.status == "fail"}
        if failed & set(RUNTIME_CHECKS):
            return ExitCode.RUNTIME_UNAVAILABLE
        if failed & set(PERMISSION_CHECKS):
            return ExitCode.PERMISSION_DENIED
        return ExitCode.SUCCESS

    def to_dict(self) -> dict:
        return {
            "checks": [check.to_dict() for check in self.checks],
            "screens": [screen.model_dump(mode="json", by_alias=True) for screen in self.screens],
        }


def hammerspoon_process_running(processes: Optional[Iterable] = None) -> bool:
    """Whether a Hammerspoon process exists for any user."""
    if processes is None:
        processes = psutil.process_iter(["name"])
    for process in processes:
        try:
            if process.info.get("name") == HAMMERSPOON_PROCESS:
                return True
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            logger.debug(f"Skipping process: {e}")
    return False


def _check_init_lua(config: LayoutsConfig) -> DoctorCheck:
    path = config.init_lua_path
    fix = f"Add {IPC_REQUIRE} to {path} and reload Hammerspoon"
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return DoctorCheck(name="init-lua", status="warn", message=f"{path} not found", fix=fix)
    except OSError as e:
        return DoctorCheck(name="init-lua", status="warn", message=f"Cannot read {path}: {e}", fix=fix)

    if IPC_REQUIRE in text:
        return DoctorCheck(name="init-lua", status="pass", message=f"{path} loads hs.ipc")
    return DoctorCheck(name="init-lua", status="warn", message=f"{path} does not load hs.ipc", fix=fix)


def _check_layouts(store: LayoutStore) -> list[DoctorCheck]:
    layouts_dir = store.layouts_dir
    if not layouts_dir.is_dir():
        return [DoctorCheck(
            name="layouts-dir",
            status="warn",
            message=f"Layouts directory not found: {layouts_dir}",
            fix=f"Run: mkdir -p {layouts_dir}  (or `layouts save <name>`)",
        )]

    names = store.list_names()
    checks = [DoctorCheck(
        name="layouts-dir",
        status="pass",
        message=f"Layouts directory exists ({layouts_dir}, {len(names)} layout{'' if len(names) == 1 else 's'})",
    )]

    for name in names:
        try:
            layout = store.load(name)
        except LayoutsError as e:
            checks.append(DoctorCheck(
                name=f"layout:{name}",
                status="fail",
                message=e.message,
                fix=e.suggestion,
            ))
            continue
        for warning in validate_layout_references(layout):
            checks.append(DoctorCheck(name=f"layout:{name}", status="warn", message=f"{name}: {warning}"))

    return checks


def run_doctor(
    config: LayoutsConfig,
    client: HammerspoonClient,
    store: LayoutStore,
    which: Callable[[str], Optional[str]] = shutil.which,
    process_running: Callable[[], bool] = hammerspoon_process_running,
) -> DoctorReport:
    """
    Run every check.

    Args:
        config: Resolved configuration
        client: Hammerspoon client
        store: Layout store
        which: PATH lookup (replaced in tests)
        process_running: Hammerspoon process probe (replaced in tests)

    Returns:
        DoctorReport
    """
    report = DoctorReport()
    checks = report.checks

    hs_path = which(config.hs_binary)
    if hs_path:
        checks.append(DoctorCheck(name="hs-binary", status="pass", message=f"Hammerspoon CLI found ({hs_path})"))
    else:
        checks.append(DoctorCheck(
            name="hs-binary",
            status="fail",
            message=f"Hammerspoon CLI ({config.hs_binary}) not found",
            fix="Install from https://www.hammerspoon.org, then run hs.ipc.cliInstall() in its console",
        ))

    if hs_path:
        if process_running():
            checks.append(DoctorCheck(name="hs-running", status="pass", message="Hammerspoon is running"))
            ipc_ok = client.is_available()
            if ipc_ok:
                checks.append(DoctorCheck(name="hs-ipc", status="pass", message="IPC module loaded"))
            else:
                checks.append(DoctorCheck(
                    name="hs-ipc",
                    status="fail",
                    message="IPC not available",
                    fix=f"Add {IPC_REQUIRE} to {config.init_lua_path} and reload Hammerspoon",
                ))
        else:
            ipc_ok = False
            checks.append(DoctorCheck(
                name="hs-running",
                status="fail",
                message="Hammerspoon is not running",
                fix="Open Hammerspoon.app",
            ))

        if ipc_ok:
            _check_runtime(client, report)

    checks.append(_check_init_lua(config))
    checks.extend(_check_layouts(store))

    logger.debug(f"Doctor: {len(checks)} check(s), exit code {report.exit_code}")
    return report


def _check_runtime(client: HammerspoonClient, report: DoctorReport) -> None:
    """Accessibility and screen checks; require a responding Hammerspoon."""
    try:
        granted = client.has_accessibility()
    except HammerspoonError as e:
        report.checks.append(DoctorCheck(
            name="accessibility",
            status="warn",
            message=f"Could not query accessibility state: {e.message}",
        ))
        granted = None

    if granted is True:
        report.checks.append(DoctorCheck(
            name="accessibility", status="pass", message="Accessibility permissions granted"
        ))
    elif granted is False:
        report.checks.append(DoctorCheck(
            name="accessibility",
            status="fail",
            message="Accessibility not enabled",
            fix="Enable in System Settings > Privacy & Security > Accessibility → Hammerspoon",
        ))

    try:
        snapshot = client.dump()
    except HammerspoonError as e:
        report.checks.append(DoctorCheck(name="screens", status="warn", message=f"Snapshot failed: {e.message}"))
        return

    report.screens = list(snapshot.screens)
    report.checks.append(DoctorCheck(
        name="screens", status="info", message=f"Screens detected: {len(snapshot.screens)}"
    ))
