import asyncio

from depthcrawl.crawler.url_frontier import SENTINEL, FrontierEntry, URLFrontier


async def test_take_on_empty_frontier_returns_sentinel():
    frontier = URLFrontier()

    entry = await frontier.take()

    assert entry == SENTINEL
    assert entry == FrontierEntry("", -1)
    assert entry.is_sentinel


async def test_take_returns_real_entry_and_shrinks_pending():
    frontier = URLFrontier([FrontierEntry("https://site.test/a", 2)])
    await frontier.add("https://site.test/b", 1)

    entry = await frontier.take()

    assert entry == FrontierEntry("https://site.test/a", 2)
    assert not entry.is_sentinel
    assert len(frontier.pending) == 1


async def test_add_same_url_enqueues_once_regardless_of_depth():
    frontier = URLFrontier()

    assert await frontier.add("https://site.test/x", 3)
    assert not await frontier.add("https://site.test/x", 5)
    assert not await frontier.add("https://site.test/x", 1)

    assert list(frontier.pending) == [FrontierEntry("https://site.test/x", 3)]


async def test_add_with_exhausted_depth_is_noop():
    frontier = URLFrontier()

    assert not await frontier.add("https://site.test/zero", 0)
    assert not await frontier.add("https://site.test/negative", -2)

    assert await frontier.is_empty()
    # Rejected urls are not marked seen either
    assert not await frontier.is_seen("https://site.test/zero")


async def test_fifo_order():
    frontier = URLFrontier()
    await frontier.add("https://site.test/a", 1)
    await frontier.add("https://site.test/b", 1)

    assert (await frontier.take()).url == "https://site.test/a"
    assert (await frontier.take()).url == "https://site.test/b"
    assert (await frontier.take()).is_sentinel


async def test_trailing_slash_variants_are_distinct():
    frontier = URLFrontier()

    assert await frontier.add("https://site.test/a", 1)
    assert await frontier.add("https://site.test/a/", 1)

    stats = await frontier.get_stats()
    assert stats == {'total_queued': 2, 'total_seen': 2}


async def test_seeds_are_deduplicated_and_marked_seen():
    frontier = URLFrontier([
        FrontierEntry("https://site.test/a", 2),
        FrontierEntry("https://site.test/b", 0),
        FrontierEntry("https://site.test/a", 5),
    ])

    assert list(frontier.pending) == [
        FrontierEntry("https://site.test/a", 2),
        FrontierEntry("https://site.test/b", 0),
    ]
    assert await frontier.is_seen("https://site.test/a")
    assert not await frontier.add("https://site.test/a", 4)


async def test_depth_zero_seed_is_still_taken():
    frontier = URLFrontier([FrontierEntry("https://site.test/only", 0)])

    entry = await frontier.take()

    assert entry == FrontierEntry("https://site.test/only", 0)
    assert not entry.is_sentinel


async def test_concurrent_adds_and_takes_lose_nothing():
    frontier = URLFrontier()
    urls = [f"https://site.test/{i}" for i in range(50)]

    # Every url is added by three competing coroutines
    results = await asyncio.gather(*[frontier.add(url, 1) for url in urls * 3])
    assert sum(results) == 50

    taken = await asyncio.gather(*[frontier.take() for _ in range(60)])
    real = [entry.url for entry in taken if not entry.is_sentinel]
    assert sorted(real) == sorted(urls)
    assert sum(1 for entry in taken if entry.is_sentinel) == 10
