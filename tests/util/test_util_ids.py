import unittest
import uuid

from kubesync.util.ids import new_plan_id, new_uuid


class TestUtilIds(unittest.TestCase):
    def test_new_uuid_is_valid_uuid4(self) -> None:
        value = new_uuid()
        parsed = uuid.UUID(value)
        self.assertEqual(str(parsed), value)
        self.assertEqual(parsed.version, 4)

    def test_new_plan_id_is_valid_uuid4(self) -> None:
        value = new_plan_id()
        parsed = uuid.UUID(value)
        self.assertEqual(parsed.version, 4)

    def test_ids_are_unique(self) -> None:
        values = {new_plan_id(), new_plan_id(), new_plan_id()}
        self.assertEqual(len(values), 3)


if __name__ == "__main__":
    unittest.main()
