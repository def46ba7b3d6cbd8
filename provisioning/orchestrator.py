# provisioning/orchestrator.py
# -*- coding: utf-8 -*-
"""
Orchestrator for provisioning runs.

This module sequences a run: the free-space gate, then for each selected
component (dependencies first) detection, intent choice and provisioning,
and finally the optional smoke test. Components are isolated from each other:
a failure in one is logged and reported while the others still run.
"""

import importlib
import logging
import pkgutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Type

from common.command_utils import get_symbols, log_step
from common.env_utils import EnvironmentStore
from common.system_utils import check_disk_space
from provisioning.base_provisioner import BaseProvisioner
from provisioning.components.kafka.smoke_test import SmokeTest
from provisioning.errors import ProvisionerError
from provisioning.intent import (
    InstallationRecord,
    IntentKind,
    ProvisionIntent,
    ProvisionResult,
    ProvisionStatus,
)
from provisioning.registry import ProvisionerRegistry
from settings.config_models import AppSettings
from ui.tui_constants import SelectFunction

DEFAULT_COMPONENTS = ["java", "kafka"]


@dataclass
class RunReport:
    """Outcome of one run, in provisioning order."""

    results: Dict[str, ProvisionResult] = field(default_factory=dict)
    smoke_test_error: Optional[ProvisionerError] = None
    smoke_test_ran: bool = False

    @property
    def exit_code(self) -> int:
        for result in self.results.values():
            if result.exit_code:
                return result.exit_code
        if self.smoke_test_error is not None:
            return self.smoke_test_error.exit_code
        return 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class ProvisionOrchestrator:
    """
    Orchestrator for the provisioning framework.

    This class imports the component modules, resolves dependencies and drives
    each provisioner in the correct order.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        select: Optional[SelectFunction] = None,
        env_store: Optional[EnvironmentStore] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            app_settings: The application settings.
            select: Interactive selector passed to every provisioner.
            env_store: Environment persistence capability passed to every provisioner.
            logger: Optional logger instance. If not provided, a new logger will be created.
        """
        self.app_settings = app_settings
        self.select = select
        self.env_store = env_store
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.symbols = get_symbols(app_settings)

        # Import all component modules to ensure they are registered
        self._import_component_modules()

    def _import_component_modules(self) -> None:
        """
        Import every module under ``provisioning.components`` so that all
        provisioner classes register themselves.
        """
        import provisioning.components

        for module_info in pkgutil.walk_packages(
            provisioning.components.__path__, prefix="provisioning.components."
        ):
            importlib.import_module(module_info.name)
            self.logger.debug(f"Imported component module: {module_info.name}")

    def get_available_components(self) -> Dict[str, Type[BaseProvisioner]]:
        return ProvisionerRegistry.get_all_provisioners()

    def resolve_dependencies(self, component_names: List[str]) -> List[str]:
        """
        Order the selected components so dependencies come first.

        Dependencies that were not selected are not added; a skipped
        component is never provisioned implicitly.
        """
        selected = set(component_names)
        return [
            name
            for name in ProvisionerRegistry.resolve_dependencies(component_names)
            if name in selected
        ]

    def create_provisioner(self, name: str) -> BaseProvisioner:
        provisioner_class = ProvisionerRegistry.get_provisioner(name)
        return provisioner_class(
            self.app_settings,
            select=self.select,
            env_store=self.env_store,
            logger=self.logger,
        )

    def check_preconditions(self) -> int:
        """
        Raises:
            PreconditionFailure: If the target volume lacks free space.
        """
        return check_disk_space(
            self.app_settings.required_free_bytes,
            self.app_settings.disk_check_volume,
            self.app_settings,
            self.logger,
        )

    def check_status(
        self, component_names: Optional[List[str]] = None
    ) -> Dict[str, InstallationRecord]:
        """
        Detect the installed state of each component.
        """
        status: Dict[str, InstallationRecord] = {}
        if component_names is None:
            component_names = DEFAULT_COMPONENTS
        for name in component_names:
            record = self.create_provisioner(name).detect()
            status[name] = record
            if record.is_installed:
                self.logger.info(
                    f"Component {name} is installed: {record.version} at {record.install_path}"
                )
            else:
                self.logger.info(f"Component {name} is not installed")
        return status

    def intent_choices(self, record: InstallationRecord) -> List[Tuple[str, ProvisionIntent]]:
        return [
            ("Update to the latest release", ProvisionIntent.update_to_detected()),
            (f"Reinstall {record.version}", ProvisionIntent.reinstall_detected()),
            ("Install a different version", ProvisionIntent.install_new()),
            (f"Keep {record.version}", ProvisionIntent.keep_current()),
        ]

    def choose_intent(
        self,
        provisioner: BaseProvisioner,
        record: InstallationRecord,
        requested: Optional[IntentKind] = None,
    ) -> ProvisionIntent:
        """
        Decide what to do with one component.

        An explicitly requested intent wins. A missing component is installed
        fresh. An installed one is offered the intent menu, or kept when
        prompts are disabled.
        """
        if requested is IntentKind.INSTALL_NEW:
            return ProvisionIntent.install_new(provisioner.configured_version)
        if requested is not None:
            return ProvisionIntent(requested)

        if not record.is_installed:
            return ProvisionIntent.install_new(provisioner.configured_version)

        if not provisioner.can_prompt:
            self.logger.info(
                f"{record.component} {record.version} already installed; keeping it"
            )
            return ProvisionIntent.keep_current()

        choices = self.intent_choices(record)
        label = self.select(
            [text for text, _ in choices],
            f"{record.component} {record.version} is installed - what now?",
        )
        return dict(choices)[label]

    def provision_component(
        self, name: str, requested: Optional[IntentKind] = None
    ) -> ProvisionResult:
        provisioner = self.create_provisioner(name)
        try:
            record = provisioner.detect()
            intent = self.choose_intent(provisioner, record, requested)
            return provisioner.provision(intent, record)
        except ProvisionerError as e:
            log_step(
                f"{self.symbols.get('error', '❌')} {name} provisioning failed "
                f"({type(e).__name__}): {e}",
                "error",
                self.logger,
                self.app_settings,
            )
            return ProvisionResult(name, ProvisionStatus.FAILED, error=e)
        except Exception as e:
            log_step(
                f"{self.symbols.get('critical', '🔥')} Unexpected error provisioning {name}: {e}",
                "critical",
                self.logger,
                self.app_settings,
                exc_info=True,
            )
            return ProvisionResult(
                name,
                ProvisionStatus.FAILED,
                error=ProvisionerError(f"Unexpected error: {e}"),
            )

    def run_smoke_test(self, report: RunReport) -> None:
        kafka = self.create_provisioner("kafka")
        if not kafka.is_installed():
            log_step(
                f"{self.symbols.get('warning', '⚠️')} Skipping smoke test: Kafka is not installed",
                "warning",
                self.logger,
                self.app_settings,
            )
            return

        report.smoke_test_ran = True
        try:
            SmokeTest(kafka.install_root, self.app_settings, logger=self.logger).run()
        except ProvisionerError as e:
            log_step(
                f"{self.symbols.get('error', '❌')} Smoke test failed ({type(e).__name__}): {e}",
                "error",
                self.logger,
                self.app_settings,
            )
            report.smoke_test_error = e

    def run(
        self,
        component_names: Optional[List[str]] = None,
        intents: Optional[Dict[str, IntentKind]] = None,
        smoke_test: bool = False,
    ) -> RunReport:
        """
        Run the full provisioning flow.

        Args:
            component_names: Components to provision; None means all, an empty
                list provisions nothing.
            intents: Explicit intent per component, bypassing the menu.
            smoke_test: Whether to start the broker and a producer/consumer
                pair afterwards.

        Returns:
            A report with one result per component.

        Raises:
            PreconditionFailure: Before anything is changed, if free space is short.
            SelectionCancelled: If the operator aborts a selection.
        """
        self.check_preconditions()

        if component_names is None:
            component_names = DEFAULT_COMPONENTS
        names = self.resolve_dependencies(component_names)
        self.logger.info(f"Provisioning components in order: {', '.join(names)}")

        report = RunReport()
        for name in names:
            result = self.provision_component(name, (intents or {}).get(name))
            report.results[name] = result
            level = "info" if result.status is not ProvisionStatus.FAILED else "error"
            if result.status is ProvisionStatus.PLACED_NOT_WIRED:
                level = "warning"
            log_step(result.summary(), level, self.logger, self.app_settings)

        if smoke_test:
            self.run_smoke_test(report)

        return report
