# restcheck/runner.py
"""
Scenario runner.

Each scenario is a strict linear pipeline:

    Built → Sent → Validated → Reported

A failure at any stage ends that scenario only and is recorded in its
ScenarioResult; the run always continues with the next scenario.
Scenarios share nothing but the read-only Settings, so ``workers > 1`` runs
them on a thread pool with one HttpClient per scenario.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Optional, Sequence

from restcheck.cassette import CassetteLibrary
from restcheck.http_client import HttpClient
from restcheck.request_builder import build_request
from restcheck.scenario import Scenario, extract_values
from restcheck.schema import SchemaStore
from restcheck.settings import Settings
from restcheck.types import (
    AssertionFailure,
    CapturedResponse,
    ConfigurationError,
    NetworkError,
    RunSummary,
    ScenarioResult,
    ScenarioStatus,
    SchemaValidationError,
)
from restcheck.validator import ResponseValidator

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], HttpClient]
ProgressCallback = Callable[[Dict[str, Any]], None]


class ScenarioRunner:
    """Run scenarios from the table and aggregate their results."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Optional[ClientFactory] = None,
        cassettes: Optional[CassetteLibrary] = None,
        schemas: Optional[SchemaStore] = None,
        progress_cb: Optional[ProgressCallback] = None,
    ):
        self.settings = settings
        self.cassettes = cassettes or CassetteLibrary(
            mode=settings.mode,
            directory=settings.cassette_dir,
            verify_ssl=settings.verify_ssl,
        )
        self.validator = ResponseValidator(schemas or SchemaStore(settings.schemas_dir))
        self._client_factory = client_factory or self._default_client
        self._progress_cb = progress_cb
        self._stop = threading.Event()

    # ==================== Public API ====================

    def stop(self) -> None:
        """Request early termination; scenarios not yet started are skipped."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def run_one(self, scenario: Scenario) -> ScenarioResult:
        """Build, send and validate one scenario."""
        result = ScenarioResult(
            scenario=scenario.name,
            api=scenario.api,
            status=ScenarioStatus.ERROR,
            method=scenario.request.method.upper(),
        )
        t0 = time.perf_counter()
        self._emit("scenario_start", name=scenario.name)

        try:
            # Built
            request = build_request(scenario.request, self.settings.base_url(scenario.api))
            result.url = request.url

            # Sent
            with self._client_factory(scenario.api) as client:
                response = client.send(request)
            result.response = response

            # Validated
            self.validator.assert_response(response, scenario.expect)
            result.status = ScenarioStatus.PASS

        except ConfigurationError as e:
            result.error_kind = "configuration"
            result.failures = [str(e)]
            logger.error(f"⚙️ {scenario.name}: configuration error: {e}")
        except NetworkError as e:
            result.error_kind = "network"
            result.failures = [str(e)]
            logger.error(f"🔌 {scenario.name}: {e}")
        except SchemaValidationError as e:
            result.status = ScenarioStatus.FAIL
            result.error_kind = "schema"
            result.failures = list(e.messages)
        except AssertionFailure as e:
            result.status = ScenarioStatus.FAIL
            result.error_kind = "assertion"
            result.failures = list(e.messages)
        except Exception as e:
            result.error_kind = type(e).__name__
            result.failures = [f"unexpected error: {e}"]
            logger.exception(f"❌ {scenario.name}: unexpected error")

        if result.response is not None and scenario.extract:
            result.extracted = extract_values(result.response, scenario.extract)
            for var, val in result.extracted.items():
                logger.info(f"{scenario.name}: {var} = {val!r}")

        result.duration_ms = (time.perf_counter() - t0) * 1000
        self._report(scenario, result)
        return result

    def run(self, scenarios: Sequence[Scenario], workers: Optional[int] = None) -> RunSummary:
        """Run ``scenarios`` and return the summary, results in table order."""
        workers = max(1, int(workers or self.settings.workers))
        summary = RunSummary(run_id=f"run_{uuid.uuid4().hex[:12]}")
        results: Dict[int, ScenarioResult] = {}
        start = time.perf_counter()

        self._emit("run_start", run_id=summary.run_id, scenarios=len(scenarios), workers=workers)
        logger.info(f"▶️ {summary.run_id}: {len(scenarios)} scenario(s), mode={self.settings.mode}, workers={workers}")

        try:
            if workers == 1:
                self._run_sequential(scenarios, results)
            else:
                self._run_parallel(scenarios, workers, results)
        except KeyboardInterrupt:
            self.stop()
            logger.warning("⏹️ Interrupted; remaining scenarios skipped")
        finally:
            self.cassettes.save()

        summary.results = [
            results.get(i) or self._skipped(s) for i, s in enumerate(scenarios)
        ]
        summary.interrupted = self.stopped
        summary.duration_s = round(time.perf_counter() - start, 2)

        self._emit(
            "run_done",
            run_id=summary.run_id,
            total=summary.total,
            passed=summary.passed,
            failed=summary.failed,
            errors=summary.errors,
            skipped=summary.skipped,
            duration_s=summary.duration_s,
        )
        return summary

    # ==================== Internals ====================

    def _default_client(self, api: str) -> HttpClient:
        return HttpClient(
            timeout=self.settings.timeout_sec,
            verify_ssl=self.settings.verify_ssl,
            transport=self.cassettes.transport_for(api),
            verbose=self.settings.verbose,
        )

    def _run_sequential(self, scenarios: Sequence[Scenario], results: Dict[int, ScenarioResult]) -> None:
        for i, s in enumerate(scenarios):
            if self.stopped:
                break
            results[i] = self.run_one(s)

    def _run_parallel(
        self,
        scenarios: Sequence[Scenario],
        workers: int,
        results: Dict[int, ScenarioResult],
    ) -> None:
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="restcheck")
        futures: Dict[Future, int] = {}
        try:
            for i, s in enumerate(scenarios):
                futures[pool.submit(self._run_unless_stopped, s)] = i
            pending = set(futures)
            while pending:
                # Short waits keep the main thread responsive to Ctrl-C
                done, pending = wait(pending, timeout=0.5, return_when=FIRST_COMPLETED)
                for f in done:
                    r = f.result()
                    if r is not None:
                        results[futures[f]] = r
        except KeyboardInterrupt:
            # In-flight requests are abandoned; they end at the request timeout
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)

    def _run_unless_stopped(self, scenario: Scenario) -> Optional[ScenarioResult]:
        if self.stopped:
            return None
        return self.run_one(scenario)

    @staticmethod
    def _skipped(scenario: Scenario) -> ScenarioResult:
        return ScenarioResult(
            scenario=scenario.name,
            api=scenario.api,
            status=ScenarioStatus.SKIPPED,
            method=scenario.request.method.upper(),
        )

    def _report(self, scenario: Scenario, result: ScenarioResult) -> None:
        code = result.response.status_code if isinstance(result.response, CapturedResponse) else None
        if result.status == ScenarioStatus.PASS:
            logger.info(f"✅ {scenario.name}: {scenario.label} → {code} ({result.duration_ms:.0f}ms)")
        elif result.status == ScenarioStatus.FAIL:
            logger.warning(f"❌ {scenario.name}: {scenario.label} → {code}: {'; '.join(result.failures)}")
        self._emit(
            "scenario_done",
            name=scenario.name,
            status=result.status.value,
            status_code=code,
            duration_ms=round(result.duration_ms, 2),
        )

    def _emit(self, event: str, **data) -> None:
        """Emit progress event"""
        if self._progress_cb:
            try:
                self._progress_cb({"event": event, **data})
            except Exception:
                logger.debug("progress_cb failed", exc_info=True)
