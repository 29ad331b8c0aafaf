import tempfile
import unittest
from pathlib import Path

from structlog.testing import capture_logs

from kubesync.errors import ApplyError, ExportError, ManifestError, ParseError
from kubesync.manifests import Manifests
from kubesync.plan import SyncDef
from kubesync.reconcile import sync


class FakeCluster:
    """In-memory cluster: exports exactly the bytes it was last given."""

    def __init__(self, objects=None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.sync_defs: list[SyncDef] = []
        self.export_error: Exception | None = None
        self.sync_error: Exception | None = None

    def export(self) -> bytes:
        if self.export_error is not None:
            raise self.export_error
        return b"\n---\n".join(self.objects[k] for k in sorted(self.objects))

    def sync(self, sync_def: SyncDef) -> None:
        self.sync_defs.append(sync_def)
        if self.sync_error is not None:
            raise self.sync_error
        for action in sync_def.actions:
            if action.is_delete:
                self.objects.pop(action.resource.id, None)
            else:
                self.objects[action.resource.id] = action.resource.bytes

    def list_namespaces(self) -> list[str]:
        return []


def _service(name: str, namespace: str = "ns1", port: int = 80) -> str:
    return (
        "apiVersion: v1\n"
        "kind: Service\n"
        "metadata:\n"
        f"  name: {name}\n"
        f"  namespace: {namespace}\n"
        "spec:\n"
        "  ports:\n"
        f"  - port: {port}\n"
    )


class TestSync(unittest.TestCase):
    def setUp(self) -> None:
        self.manifests = Manifests()

    def test_round_trip_through_repository(self) -> None:
        cluster = FakeCluster()
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "svc-a.yaml").write_text(_service("svc-a"), encoding="utf-8")
            (root / "svc-b.yaml").write_text(_service("svc-b"), encoding="utf-8")

            desired = self.manifests.load(tmp)
            sync(self.manifests, desired, cluster, True)
            self.assertEqual(self.manifests.parse(cluster.export()), desired)

            # A second pass over the same state has nothing to do.
            sync(self.manifests, desired, cluster, True)
            self.assertTrue(cluster.sync_defs[-1].is_empty())

            # Removing a file removes the object.
            (root / "svc-b.yaml").unlink()
            desired = self.manifests.load(tmp)
            sync(self.manifests, desired, cluster, True)

        self.assertEqual(sorted(cluster.objects), ["ns1:service/svc-a"])
        last = cluster.sync_defs[-1]
        self.assertEqual([r.id for r in last.deletes], ["ns1:service/svc-b"])
        self.assertEqual(last.applies, [])

    def test_changed_resource_is_reapplied(self) -> None:
        cluster = FakeCluster()
        desired = self.manifests.parse(_service("svc-a").encode())
        sync(self.manifests, desired, cluster, True)

        changed = self.manifests.parse(_service("svc-a", port=8080).encode())
        sync(self.manifests, changed, cluster, True)

        self.assertEqual([r.id for r in cluster.sync_defs[-1].applies], ["ns1:service/svc-a"])
        self.assertEqual(self.manifests.parse(cluster.export()), changed)

    def test_deletes_disabled_leaves_extra_objects(self) -> None:
        cluster = FakeCluster()
        both = self.manifests.parse(f"{_service('a')}---\n{_service('b')}".encode())
        sync(self.manifests, both, cluster, True)

        only_a = self.manifests.parse(_service("a").encode())
        sync(self.manifests, only_a, cluster, False)

        self.assertEqual(sorted(cluster.objects), ["ns1:service/a", "ns1:service/b"])
        self.assertEqual(cluster.sync_defs[-1].deletes, [])

    def test_empty_desired_deletes_nothing(self) -> None:
        cluster = FakeCluster()
        sync(self.manifests, self.manifests.parse(_service("a").encode()), cluster, True)

        with capture_logs() as logs:
            sync(self.manifests, {}, cluster, True)

        self.assertEqual(list(cluster.objects), ["ns1:service/a"])
        self.assertIn("deletes_suppressed", [e["event"] for e in logs])

    def test_namespace_whitelist(self) -> None:
        cluster = FakeCluster()
        desired = self.manifests.parse(
            f"{_service('a', 'ns1')}---\n{_service('b', 'ns2')}".encode()
        )
        sync(self.manifests, desired, cluster, True, {"ns2"})
        self.assertEqual(list(cluster.objects), ["ns2:service/b"])

    def test_whitelist_excludes_everything(self) -> None:
        cluster = FakeCluster()
        desired = self.manifests.parse(_service("a", "ns1").encode())
        sync(self.manifests, desired, cluster, True, {"ns9"})
        self.assertEqual(cluster.objects, {})
        self.assertTrue(cluster.sync_defs[-1].is_empty())

    def test_plan_is_logged(self) -> None:
        cluster = FakeCluster()
        desired = self.manifests.parse(_service("a").encode())
        with capture_logs() as logs:
            sync(self.manifests, desired, cluster, True)

        planned = [e for e in logs if e["event"] == "sync_planned"]
        self.assertEqual(len(planned), 1)
        self.assertEqual(planned[0]["applies"], 1)
        self.assertEqual(planned[0]["deletes"], 0)
        self.assertEqual(planned[0]["plan_id"], cluster.sync_defs[-1].plan_id)

    def test_export_failure_is_wrapped(self) -> None:
        cluster = FakeCluster()
        cluster.export_error = RuntimeError("connection refused")

        with self.assertRaises(ExportError) as ctx:
            sync(self.manifests, {}, cluster, True)

        self.assertEqual(str(ctx.exception), "exporting resource defs from cluster")
        self.assertIs(ctx.exception.cause, cluster.export_error)
        self.assertIs(ctx.exception.__cause__, cluster.export_error)
        self.assertEqual(cluster.sync_defs, [])

    def test_parse_failure_is_wrapped(self) -> None:
        cluster = FakeCluster({"x": b"kind: [broken"})

        with self.assertRaises(ParseError) as ctx:
            sync(self.manifests, {}, cluster, True)

        self.assertEqual(str(ctx.exception), "parsing exported resources")
        self.assertIsInstance(ctx.exception.cause, ManifestError)
        self.assertEqual(cluster.sync_defs, [])

    def test_apply_error_is_not_wrapped(self) -> None:
        cluster = FakeCluster()
        cluster.sync_error = ApplyError("1 of 1 sync actions failed", details={"failures": {}})

        with self.assertRaises(ApplyError) as ctx:
            sync(self.manifests, self.manifests.parse(_service("a").encode()), cluster, True)

        self.assertIs(ctx.exception, cluster.sync_error)


if __name__ == "__main__":
    unittest.main()
