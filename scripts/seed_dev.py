from datetime import datetime, timedelta

from luckydraw.db.engine import get_sessionmaker, make_engine
from luckydraw.models import Base, Drawing, Patron, SignIn
from luckydraw.week_clock import current_week

SAMPLE_PATRONS = [
    ("Alice Anderson", "(555)010-0001"),
    ("Bob Brennan", None),
    ("Carmen Diaz", "(555)010-0003"),
    ("Daniel Okafor", None),
    ("Evelyn Tran", "(555)010-0005"),
    ("Frank Ianelli", None),
]


def main() -> None:
    """Seed the development database with sample patrons, sign-ins and a drawing."""
    engine = make_engine()

    # Drop and recreate all tables with foreign keys off so SQLite can drop
    # tables that reference each other in any order.
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)

    this_week = current_week()
    last_week_time = datetime.now() - timedelta(days=7)
    last_week = current_week(last_week_time)

    with Session.begin() as session:
        patrons = [
            Patron.create(session, name=name, contact=contact)
            for name, contact in SAMPLE_PATRONS
        ]

        # Last week: three sign-ins and a drawing that rolled over.
        for patron in patrons[:3]:
            SignIn.record(session, patron.id, last_week)
        session.add(
            Drawing(
                week_number=last_week,
                drawn_number=patrons[-1].assigned_number,
                prize_amount=3,
            )
        )

        # This week: four sign-ins, drawing still pending.
        for patron in patrons[1:5]:
            SignIn.record(session, patron.id, this_week)

    print("Development database seeded.")


if __name__ == "__main__":
    main()
