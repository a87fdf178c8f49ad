"""Test deterministic seeding functionality."""

import random

from faker import Faker
from sqlalchemy.orm import sessionmaker

from chirp.db import make_engine
from chirp.models import Base, Follow, Like, Post, User
from chirp.services import seeder
from chirp.services.seeder import seed_random_generators
from chirp.services.text import USERNAME_RE


class TestDeterministicSeeding:
    """Test that seeding produces deterministic results."""

    def test_faker_seed_deterministic(self):
        """Test that Faker.seed_instance produces deterministic results."""
        fake1 = Faker()
        fake1.seed_instance(1337)
        names1 = [fake1.user_name() for _ in range(5)]

        fake2 = Faker()
        fake2.seed_instance(1337)
        names2 = [fake2.user_name() for _ in range(5)]

        assert names1 == names2

    def test_seed_random_generators_function(self):
        """Test that seed_random_generators resets both generators."""
        seed_random_generators()
        random_values1 = [random.randint(1, 100) for _ in range(5)]
        fake_names1 = [seeder.fake.user_name() for _ in range(3)]

        seed_random_generators()
        random_values2 = [random.randint(1, 100) for _ in range(5)]
        fake_names2 = [seeder.fake.user_name() for _ in range(3)]

        assert random_values1 == random_values2
        assert fake_names1 == fake_names2

    def test_seeded_users_are_valid_and_repeatable(self):
        runs = []
        for _ in range(2):
            engine = make_engine("sqlite://")
            Base.metadata.create_all(engine)
            with sessionmaker(bind=engine)() as db:
                seed_random_generators(42)
                runs.append([u.username for u in seeder.make_users(db, 5)])
            engine.dispose()

        first, second = runs
        assert first == second
        assert all(USERNAME_RE.match(name) and 3 <= len(name) <= 15 for name in first)


class TestSeedData:
    def test_small_dataset(self, db):
        seed_random_generators()
        users = seeder.make_users(db, 6)
        posts = seeder.make_posts(db, users, 20)
        follows = seeder.make_follows(db, users, max_per_user=3)
        likes = seeder.make_likes(db, users, posts, max_per_post=3)

        assert db.query(User).count() == 6
        assert db.query(Post).count() == 20
        assert db.query(Follow).count() == follows
        assert db.query(Like).count() == likes
