import unittest
from unittest.mock import MagicMock

from painel.models.project import Project
from painel.realtime import ALL_TABLES, Change, ChangeFeed, feed, queue_change
from tests.base import DatabaseTestCase


class TestChangeFeed(unittest.TestCase):
    def setUp(self):
        self.feed = ChangeFeed()

    def test_filter_by_table_and_row(self):
        recebidas = []
        self.feed.subscribe("investments", {"user_id": 1}, recebidas.append)

        self.feed.publish(Change("investments", "INSERT", {"id": 1, "user_id": 1}))
        self.feed.publish(Change("investments", "INSERT", {"id": 2, "user_id": 2}))
        self.feed.publish(Change("revenues", "INSERT", {"id": 3, "user_id": 1}))

        self.assertEqual([c.row["id"] for c in recebidas], [1])

    def test_callable_filter_and_wildcard(self):
        recebidas = []
        self.feed.subscribe(ALL_TABLES, lambda c: c.event == "DELETE", recebidas.append)

        self.feed.publish(Change("tasks", "INSERT", {"id": 1}))
        self.feed.publish(Change("tasks", "DELETE", {"id": 1}))

        self.assertEqual(len(recebidas), 1)
        self.assertEqual(recebidas[0].to_dict(), {"table": "tasks", "event": "DELETE", "row": {"id": 1}})

    def test_unsubscribe(self):
        callback = MagicMock()
        unsubscribe = self.feed.subscribe("projects", None, callback)
        self.assertEqual(self.feed.subscriber_count, 1)

        unsubscribe()
        unsubscribe()
        self.feed.publish(Change("projects", "INSERT", {"id": 1}))

        callback.assert_not_called()
        self.assertEqual(self.feed.subscriber_count, 0)

    def test_failing_subscriber_does_not_block_others(self):
        quebrado = MagicMock(side_effect=RuntimeError("boom"))
        recebidas = []
        self.feed.subscribe("projects", None, quebrado)
        self.feed.subscribe("projects", None, recebidas.append)

        self.feed.publish(Change("projects", "UPDATE", {"id": 1}))

        quebrado.assert_called_once()
        self.assertEqual(len(recebidas), 1)


class TestSessionIntegration(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        self.feed = ChangeFeed()
        self.feed.attach(self.db)
        self.recebidas = []
        self.feed.subscribe("projects", {"user_id": self.user.id}, self.recebidas.append)

    def tearDown(self):
        self.feed.detach(self.db)
        super().tearDown()

    def test_publishes_after_commit(self):
        projeto = Project(user_id=self.user.id, name="Loja")
        self.db.add(projeto)
        self.db.flush()
        self.assertEqual(self.recebidas, [])

        self.db.commit()

        self.assertEqual(len(self.recebidas), 1)
        self.assertEqual(self.recebidas[0].event, "INSERT")
        self.assertEqual(self.recebidas[0].row, {"id": projeto.id, "user_id": self.user.id})

    def test_rollback_discards_pending(self):
        self.db.add(Project(user_id=self.user.id, name="Descartado"))
        self.db.flush()
        self.db.rollback()

        self.db.add(Project(user_id=self.user.id, name="Mantido"))
        self.db.commit()

        self.assertEqual(len(self.recebidas), 1)

    def test_update_and_delete(self):
        projeto = self.make_project(self.user)
        self.recebidas.clear()

        projeto.status = "paused"
        self.db.commit()
        self.db.refresh(projeto)
        self.db.delete(projeto)
        self.db.commit()

        self.assertEqual([c.event for c in self.recebidas], ["UPDATE", "DELETE"])

    def test_every_attached_feed_receives_the_commit(self):
        globais = []
        unsubscribe = feed.subscribe("projects", {"user_id": self.user.id}, globais.append)
        try:
            self.db.add(Project(user_id=self.user.id, name="Loja"))
            queue_change(self.db, "projects", "UPSERT", {"id": 99, "user_id": self.user.id})
            self.db.commit()
        finally:
            unsubscribe()

        self.assertEqual([c.event for c in self.recebidas], ["UPSERT", "INSERT"])
        self.assertEqual([c.event for c in globais], ["UPSERT", "INSERT"])

    def test_detached_feed_stops_listening(self):
        self.feed.detach(self.db)
        self.assertFalse(self.feed.listens_to(self.db))

        self.db.add(Project(user_id=self.user.id, name="Loja"))
        self.db.commit()

        self.assertEqual(self.recebidas, [])

    def test_queued_change_is_published_on_commit(self):
        queue_change(self.db, "projects", "UPSERT", {"id": 99, "user_id": self.user.id})
        self.assertEqual(self.recebidas, [])

        self.db.commit()

        self.assertEqual(self.recebidas[0].event, "UPSERT")


if __name__ == "__main__":
    unittest.main()
