import pytest

from posture_scanner.core.config import ScannerConfig
from posture_scanner.core.errors import UnknownPluginError
from posture_scanner.core.results import PluginOutput, ResultStatus
from posture_scanner.plugins import PLUGINS
from posture_scanner.scanners.posture_scanner import PostureScanner


class TestPostureScanner:
    def test_run_scan_all_plugins(self, multi_service_cache, scanner_config):
        report = PostureScanner(scanner_config).run_scan(multi_service_cache)

        assert set(report.plugins_applied) == set(PLUGINS)
        assert report.errors == []
        assert report.scan_id.startswith("scan-")

        aks = report.outputs["aksManagedIdentity"].results
        assert sorted((r.region, r.status) for r in aks) == [
            ("eastus", ResultStatus.OK),
            ("eastus", ResultStatus.FAIL),
            ("westus", ResultStatus.OK),
        ]

        event_grid = report.outputs["domainMinimumTlsVersion"].results
        unknown = [r for r in event_grid if r.status == ResultStatus.UNKNOWN]
        assert len(unknown) == 1
        assert unknown[0].region == "westeurope"
        assert unknown[0].message.endswith("AuthorizationFailed")

        # vaults, webApps, servers have no cache entries at all
        assert report.outputs["keyVaultPurgeProtection"].results == []

    def test_summary_counts(self, multi_service_cache, scanner_config):
        report = PostureScanner(scanner_config).run_scan(multi_service_cache)

        total = sum(len(o.results) for o in report.outputs.values())
        assert report.summary["total_results"] == total
        assert (
            report.summary["ok"]
            + report.summary["warn"]
            + report.summary["fail"]
            + report.summary["unknown"]
            == total
        )
        assert report.summary["unknown"] == 1
        # aks: 1, event grid: 1, storage: 3 plugins x 1 legacy account
        assert report.summary["fail"] == 5

    def test_run_selected_plugins(self, multi_service_cache):
        report = PostureScanner().run_scan(
            multi_service_cache, ["aksManagedIdentity"]
        )
        assert report.plugins_applied == ["aksManagedIdentity"]

    def test_unknown_plugin_id(self, multi_service_cache):
        with pytest.raises(UnknownPluginError):
            PostureScanner().run_scan(multi_service_cache, ["missing"])

    def test_enabled_and_excluded_plugins(self, multi_service_cache):
        config = ScannerConfig(
            enabled_plugins=["aksManagedIdentity", "storageAccountsHttps"],
            exclude_plugins=["storageAccountsHttps"],
        )
        report = PostureScanner(config).run_scan(multi_service_cache)
        assert report.plugins_applied == ["aksManagedIdentity"]

    def test_settings_from_config_reach_plugins(self, multi_service_cache):
        config = ScannerConfig(
            plugin_settings={"event_grid_domain_min_tls_version": "1.1"}
        )
        report = PostureScanner(config).run_scan(
            multi_service_cache, ["domainMinimumTlsVersion"]
        )

        statuses = [
            r.status
            for r in report.outputs["domainMinimumTlsVersion"].results
            if r.region == "eastus"
        ]
        assert statuses == [ResultStatus.OK, ResultStatus.OK]

    def test_run_passes_parallelism_and_deadline(self, multi_service_cache, mocker):
        config = ScannerConfig(parallel_scans=2, timeout_seconds=15)
        run = mocker.patch.object(
            PLUGINS["aksManagedIdentity"], "run", return_value=PluginOutput()
        )

        PostureScanner(config).run_scan(multi_service_cache, ["aksManagedIdentity"])

        run.assert_called_once_with(
            multi_service_cache,
            {"govcloud": False},
            max_workers=2,
            timeout=15,
        )

    def test_plugin_crash_recorded_as_error(self, multi_service_cache, mocker):
        mocker.patch.object(
            PLUGINS["aksManagedIdentity"], "run", side_effect=RuntimeError("boom")
        )

        report = PostureScanner().run_scan(
            multi_service_cache, ["aksManagedIdentity", "storageAccountsHttps"]
        )

        assert report.errors == ["aksManagedIdentity: boom"]
        assert report.plugins_applied == ["storageAccountsHttps"]

    def test_realtime_scan_selects_triggered_plugins(self, multi_service_cache):
        report = PostureScanner().run_realtime_scan(
            multi_service_cache,
            [
                "Microsoft.ContainerService/managedClusters/write",
                {"operationName": "microsofteventgrid:domains:write"},
            ],
        )

        assert set(report.plugins_applied) == {
            "aksManagedIdentity",
            "domainMinimumTlsVersion",
        }

    def test_realtime_scan_respects_exclusions(self, multi_service_cache):
        config = ScannerConfig(exclude_plugins=["storageAccountsHttps"])
        report = PostureScanner(config).run_realtime_scan(
            multi_service_cache, ["microsoftstorage:storageaccounts:write"]
        )

        assert set(report.plugins_applied) == {
            "storageAccountPublicAccess",
            "storageAccountMinimumTlsVersion",
        }

    def test_realtime_scan_without_matches(self, multi_service_cache):
        report = PostureScanner().run_realtime_scan(multi_service_cache, ["", {}])

        assert report.plugins_applied == []
        assert report.summary["total_results"] == 0

    def test_compliance_summary(self, multi_service_cache):
        scanner = PostureScanner()
        report = scanner.run_scan(
            multi_service_cache, ["aksManagedIdentity", "storageAccountsHttps"]
        )

        summary = scanner.get_compliance_summary(report)

        # aks: 2 ok / 1 fail, storage https: 1 ok / 1 fail
        assert summary["overall_score"] == 60.0
        assert summary["by_plugin"]["aksManagedIdentity"]["fail"] == 1
        assert {f["plugin_id"] for f in summary["failing_resources"]} == {
            "aksManagedIdentity",
            "storageAccountsHttps",
        }

    def test_compliance_summary_without_results(self):
        scanner = PostureScanner()
        summary = scanner.get_compliance_summary(scanner.run_scan({}))
        assert summary["overall_score"] == 100.0

    def test_report_to_dict(self, multi_service_cache):
        report = PostureScanner().run_scan(multi_service_cache, ["aksManagedIdentity"])
        data = report.to_dict()

        assert data["summary"] == report.summary
        assert {r["status"] for r in data["results"]["aksManagedIdentity"]} == {0, 2}
