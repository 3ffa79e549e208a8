"""Populate the blog database with demo users, posts and comments."""
import argparse
import asyncio
import logging
import random
import time

from blog_api.database import Base, async_session, engine
from blog_api.models import Comment, Post, User

logger = logging.getLogger("seed")

TOPICS = ["python", "fastapi", "postgresql", "docker", "testing", "security",
          "performance", "asyncio", "sqlalchemy", "deployment"]

DEFAULT_PASSWORD = "password123"


async def seed(small: bool = False) -> None:
    num_users = 5 if small else 25
    num_posts = 20 if small else 500
    max_comments = 3 if small else 8

    logger.info("Seeding %d users, %d posts, up to %d comments per post",
                num_users, num_posts, max_comments)
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:03d}",
                email=f"user_{i:03d}@example.com",
                bio=f"Writes about {random.choice(TOPICS)}.",
            )
            user.password = DEFAULT_PASSWORD
            session.add(user)
            users.append(user)
        await session.flush()

        # A few follow edges so the following list is not always empty.
        for user in users:
            user.following.extend(random.sample([u for u in users if u is not user], k=min(2, num_users - 1)))

        total_comments = 0
        for i in range(num_posts):
            topic = random.choice(TOPICS)
            post = Post(
                title=f"Notes on {topic} #{i}",
                content=f"Some practical notes about {topic} and {random.choice(TOPICS)}. " * 5,
                author=random.choice(users),
            )
            session.add(post)
            await session.flush()

            for _ in range(random.randint(0, max_comments)):
                session.add(Comment(
                    content=f"Thanks, the {topic} part was helpful.",
                    author=random.choice(users),
                    post_id=post.id,
                ))
                total_comments += 1

        await session.commit()

    elapsed = time.perf_counter() - start
    logger.info("Seeding complete in %.1fs: %d users, %d posts, %d comments (password: %s)",
                elapsed, num_users, num_posts, total_comments, DEFAULT_PASSWORD)


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
