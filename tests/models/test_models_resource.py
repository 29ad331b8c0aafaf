import unittest

from kubesync.models import Policy, PolicySet, Resource, ResourceID


class TestResourceID(unittest.TestCase):
    def test_string_form(self) -> None:
        rid = ResourceID(namespace="ns1", kind="Deployment", name="web")
        self.assertEqual(str(rid), "ns1:deployment/web")

    def test_cluster_scoped(self) -> None:
        rid = ResourceID(namespace="", kind="Namespace", name="ns1")
        self.assertEqual(str(rid), "<cluster>:namespace/ns1")

    def test_parse_round_trip(self) -> None:
        for text in ("ns1:service/svc-a", "<cluster>:namespace/ns1"):
            self.assertEqual(str(ResourceID.parse(text)), text)

        rid = ResourceID.parse("<cluster>:clusterrole/admin")
        self.assertEqual(rid.namespace, "")

    def test_parse_invalid(self) -> None:
        with self.assertRaises(ValueError):
            ResourceID.parse("no-separators")
        with self.assertRaises(ValueError):
            ResourceID.parse("ns:kind-without-name")

    def test_requires_kind_and_name(self) -> None:
        with self.assertRaises(ValueError):
            ResourceID(namespace="ns", kind="", name="x")

    def test_same_object_same_id(self) -> None:
        a = ResourceID(namespace="ns1", kind="Service", name="svc")
        b = ResourceID(namespace="ns1", kind="service", name="svc")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))


class TestResource(unittest.TestCase):
    def test_accessors(self) -> None:
        res = Resource(
            resource_id=ResourceID(namespace="ns1", kind="Service", name="svc"),
            bytes=b"kind: Service",
            policy=PolicySet.of(Policy.IGNORE),
        )
        self.assertEqual(res.id, "ns1:service/svc")
        self.assertEqual(res.namespace, "ns1")
        self.assertEqual(res.kind, "service")
        self.assertEqual(res.name, "svc")
        self.assertTrue(res.policy.contains(Policy.IGNORE))

    def test_immutable(self) -> None:
        res = Resource(
            resource_id=ResourceID(namespace="ns1", kind="Service", name="svc"),
            bytes=b"",
        )
        with self.assertRaises(Exception):
            res.bytes = b"changed"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
