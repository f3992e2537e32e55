import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm import sessionmaker

from luckydraw.models import Base, Drawing, Patron, SignIn
from luckydraw.models.patron import MAX_ASSIGNED_NUMBER


class DBTestCase(unittest.TestCase):
    def setUp(self):
        # In-memory SQLite for isolation
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self):
        self.engine.dispose()


class PatronDirectoryTests(DBTestCase):
    def test_sequential_creates_assign_increasing_numbers(self):
        with self.Session.begin() as session:
            numbers = [
                Patron.create(session, name=f"Patron {i}").assigned_number
                for i in range(7)
            ]
        self.assertEqual(numbers, [1, 2, 3, 4, 5, 6, 7])

    def test_create_continues_from_highest_number(self):
        with self.Session.begin() as session:
            session.add(Patron(name="Imported", assigned_number=41))
            session.flush()
            patron = Patron.create(session, name="New")
        self.assertEqual(patron.assigned_number, 42)

    def test_create_normalizes_fields(self):
        with self.Session.begin() as session:
            patron = Patron.create(session, name="  Ada Lovelace ", contact="   ")
            self.assertIsNotNone(patron.id)
            self.assertIsNotNone(patron.created_at)
        self.assertEqual(patron.name, "Ada Lovelace")
        self.assertIsNone(patron.contact)

    def test_create_rejects_blank_name(self):
        with self.Session.begin() as session:
            with self.assertRaises(ValueError):
                Patron.create(session, name="   ")

    def test_duplicate_assigned_number_rejected_by_constraint(self):
        with self.Session() as session:
            session.add(Patron(name="First", assigned_number=1))
            session.commit()
            # Simulates two registrations that both read the same maximum.
            with patch.object(Patron, "next_assigned_number", return_value=1):
                with self.assertRaises(IntegrityError):
                    Patron.create(session, name="Racer")

    def test_find_by_id(self):
        with self.Session.begin() as session:
            patron = Patron.create(session, name="Grace")
            self.assertIs(Patron.find_by_id(session, patron.id), patron)
            self.assertIsNone(Patron.find_by_id(session, patron.id + 100))

    def test_find_by_number_requires_a_row(self):
        with self.Session.begin() as session:
            patron = Patron.create(session, name="Grace")
            self.assertEqual(Patron.find_by_number(session, 1).id, patron.id)
            self.assertIsNone(Patron.get_by_number(session, 2))
            with self.assertRaises(NoResultFound):
                Patron.find_by_number(session, 2)

    def test_search_by_number_is_exact(self):
        with self.Session.begin() as session:
            for name in ["One", "Two", "Three", "Four", "Room 5 regular", "Six"]:
                Patron.create(session, name=name)
            for _ in range(10):
                Patron.create(session, name="Filler")

            results = Patron.search(session, "5")
            self.assertEqual([p.assigned_number for p in results], [5])
            self.assertEqual(Patron.search(session, " 15 ")[0].assigned_number, 15)
            self.assertEqual(Patron.search(session, "99"), [])
            self.assertEqual(Patron.search(session, "2.5"), [])

    def test_search_by_out_of_range_number_matches_nothing(self):
        with self.Session.begin() as session:
            for name in ["One", "Two", "Three"]:
                Patron.create(session, name=name)

            self.assertEqual(Patron.search(session, "1e20"), [])
            self.assertEqual(Patron.search(session, "9" * 40), [])
            self.assertEqual(Patron.search(session, "1" + "0" * 30), [])
            self.assertEqual(Patron.search(session, "0"), [])
            self.assertEqual(Patron.search(session, "-3"), [])
            self.assertEqual(Patron.search(session, "inf"), [])
            self.assertEqual(Patron.search(session, str(MAX_ASSIGNED_NUMBER + 1)), [])
            self.assertEqual(Patron.search(session, "3e0")[0].assigned_number, 3)

    def test_search_by_large_number_keeps_every_digit(self):
        with self.Session.begin() as session:
            session.add(Patron(name="Big", assigned_number=2**53))
            session.flush()

            self.assertEqual(Patron.search(session, str(2**53 + 1)), [])
            hits = Patron.search(session, str(2**53))
            self.assertEqual([p.name for p in hits], ["Big"])

    def test_search_by_name_is_case_insensitive_and_capped(self):
        with self.Session.begin() as session:
            names = ["ANNA", "Dan", "Frank", "Bob", "Nancy", "Joan"] + [
                f"Stan {i}" for i in range(8)
            ]
            for name in names:
                Patron.create(session, name=name)

            results = Patron.search(session, "an")
            self.assertEqual(len(results), 10)
            for patron in results:
                self.assertIn("an", patron.name.lower())
            self.assertNotIn("Bob", [p.name for p in results])

    def test_search_treats_wildcards_literally(self):
        with self.Session.begin() as session:
            Patron.create(session, name="100% Club")
            Patron.create(session, name="Plain")
            self.assertEqual([p.name for p in Patron.search(session, "0%")], ["100% Club"])
            self.assertEqual(Patron.search(session, "_"), [])

    def test_blank_search_does_not_query(self):
        with self.Session() as session:
            with patch.object(session, "scalars") as scalars:
                self.assertEqual(Patron.search(session, "   "), [])
                self.assertEqual(Patron.search(session, ""), [])
            scalars.assert_not_called()

    def test_list_all_and_lookup_by_name(self):
        with self.Session.begin() as session:
            Patron.create(session, name="Zoe Martin")
            Patron.create(session, name="Amartya Sen")
            Patron.create(session, name="Bea")

            everyone = Patron.list_all(session)
            self.assertEqual([p.assigned_number for p in everyone], [1, 2, 3])

            found = Patron.lookup_by_name(session, "MART")
            assert found is not None
            self.assertEqual(found.name, "Amartya Sen")
            self.assertIsNone(Patron.lookup_by_name(session, "nobody"))
            self.assertIsNone(Patron.lookup_by_name(session, " "))


class SignInLedgerTests(DBTestCase):
    def _patrons(self, session, count):
        return [Patron.create(session, name=f"P{i}") for i in range(count)]

    def test_record_and_has_signed_in(self):
        with self.Session.begin() as session:
            alice, bob = self._patrons(session, 2)
            sign_in = SignIn.record(session, alice.id, 10)
            self.assertIsNotNone(sign_in.id)
            self.assertEqual(sign_in.week_number, 10)

            self.assertTrue(SignIn.has_signed_in(session, alice.id, 10))
            self.assertFalse(SignIn.has_signed_in(session, alice.id, 11))
            self.assertFalse(SignIn.has_signed_in(session, bob.id, 10))

    def test_record_does_not_deduplicate(self):
        with self.Session.begin() as session:
            (alice,) = self._patrons(session, 1)
            SignIn.record(session, alice.id, 3)
            SignIn.record(session, alice.id, 3)
            self.assertEqual(len(SignIn.list_for_week(session, 3)), 2)
            self.assertEqual(SignIn.count_for_week(session, 3), 2)

    def test_signed_in_set(self):
        with self.Session.begin() as session:
            a, b, c = self._patrons(session, 3)
            SignIn.record(session, a.id, 5)
            SignIn.record(session, c.id, 5)
            SignIn.record(session, b.id, 6)

            self.assertEqual(SignIn.signed_in_set(session, [a.id, b.id, c.id], 5), {a.id, c.id})
            self.assertEqual(SignIn.signed_in_set(session, [b.id], 5), set())
            self.assertEqual(SignIn.signed_in_set(session, [], 5), set())

    def test_week_listings(self):
        with self.Session.begin() as session:
            a, b = self._patrons(session, 2)
            SignIn.record(session, b.id, 7)
            SignIn.record(session, a.id, 7)
            SignIn.record(session, a.id, 8)

            self.assertEqual(SignIn.ids_for_week(session, 7), [b.id, a.id])
            self.assertEqual(
                [s.patron_id for s in SignIn.list_for_week(session, 7)], [b.id, a.id]
            )
            self.assertEqual(SignIn.ids_for_week(session, 9), [])
            self.assertEqual(SignIn.count_for_week(session, 9), 0)


class DrawingModelTests(DBTestCase):
    def test_get_by_week_and_latest(self):
        base = datetime(2026, 3, 1, tzinfo=timezone.utc)
        with self.Session.begin() as session:
            older = Drawing(week_number=8, drawn_number=3, prize_amount=4, created_at=base)
            newer = Drawing(
                week_number=9,
                drawn_number=1,
                prize_amount=6,
                created_at=base + timedelta(days=7),
            )
            session.add_all([newer, older])
            session.flush()

            self.assertIs(Drawing.get_by_week(session, 8), older)
            self.assertIsNone(Drawing.get_by_week(session, 10))
            self.assertIs(Drawing.get_latest(session), newer)

    def test_latest_is_none_without_drawings(self):
        with self.Session() as session:
            self.assertIsNone(Drawing.get_latest(session))

    def test_unclaimed_amount(self):
        with self.Session.begin() as session:
            patron = Patron.create(session, name="Winner")
            won = Drawing(week_number=1, drawn_number=1, prize_amount=9, winner_id=patron.id)
            lost = Drawing(week_number=2, drawn_number=1, prize_amount=9)
            self.assertTrue(won.has_winner)
            self.assertEqual(won.unclaimed_amount, 0)
            self.assertFalse(lost.has_winner)
            self.assertEqual(lost.unclaimed_amount, 9)


if __name__ == "__main__":
    unittest.main()
