import unittest

from kubesync.models import Resource, ResourceID
from kubesync.plan import SyncAction, SyncDef, kind_rank, order_actions


def _res(kind: str, name: str, ns: str = "ns1") -> Resource:
    return Resource(ResourceID(namespace=ns, kind=kind, name=name), b"")


class TestOrdering(unittest.TestCase):
    def test_kind_rank_known_and_unknown(self) -> None:
        self.assertLess(kind_rank("Namespace"), kind_rank("Deployment"))
        self.assertLess(kind_rank("ConfigMap"), kind_rank("Deployment"))
        self.assertEqual(kind_rank("SomeCustomThing"), kind_rank("AnotherCustomThing"))

    def test_applies_dependencies_first(self) -> None:
        dep = _res("Deployment", "web")
        ns = _res("Namespace", "ns1", ns="")
        cm = _res("ConfigMap", "conf")
        sync_def = SyncDef(
            actions=[SyncAction.apply(dep), SyncAction.apply(ns), SyncAction.apply(cm)]
        )
        ordered = [a.resource for a in order_actions(sync_def)]
        self.assertEqual(ordered, [ns, cm, dep])

    def test_deletes_dependents_first_and_before_applies(self) -> None:
        ns = _res("Namespace", "old", ns="")
        dep = _res("Deployment", "web", ns="old")
        svc = _res("Service", "new")
        sync_def = SyncDef(
            actions=[SyncAction.delete(ns), SyncAction.delete(dep), SyncAction.apply(svc)]
        )
        ordered = order_actions(sync_def)
        self.assertEqual(
            ordered,
            [SyncAction.delete(dep), SyncAction.delete(ns), SyncAction.apply(svc)],
        )

    def test_ties_keep_sync_def_order(self) -> None:
        a = _res("Service", "a")
        b = _res("Service", "b")
        sync_def = SyncDef(actions=[SyncAction.apply(b), SyncAction.apply(a)])
        self.assertEqual([x.resource for x in order_actions(sync_def)], [b, a])


if __name__ == "__main__":
    unittest.main()
