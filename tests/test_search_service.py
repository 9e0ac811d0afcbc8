import pytest


@pytest.mark.parametrize("query", ["", "   ", None])
async def test_blank_query_returns_nothing(search_service, make_song, alice, query):
    await make_song()
    result = await search_service.search(query, alice)
    assert result.songs == []
    assert result.playlists == []


async def test_matches_song_titles_case_insensitively(search_service, make_song, alice):
    await make_song("Lofi Dreams")
    await make_song("Rock Anthem")

    result = await search_service.search("LO", alice)

    assert [s.title for s in result.songs] == ["Lofi Dreams"]


async def test_matches_every_users_playlists(search_service, make_playlist, alice, bob):
    await make_playlist(bob, "Lofi for coding")
    await make_playlist(alice, "Workout")

    result = await search_service.search("lofi", alice)

    assert [p.name for p in result.playlists] == ["Lofi for coding"]
    assert result.songs == []


async def test_caps_each_list_at_limit(search_service, make_song, make_playlist, alice):
    for i in range(12):
        await make_song(f"Chill {i}")
        await make_playlist(alice, f"Chill mix {i}")

    result = await search_service.search("chill", alice)

    assert len(result.songs) == 10
    assert len(result.playlists) == 10
    assert result.songs[0].title == "Chill 0"


async def test_query_is_matched_as_given(search_service, make_song, alice):
    await make_song("Lofi")
    await make_song("Lofi Beats")

    result = await search_service.search("Lofi ", alice)

    assert [s.title for s in result.songs] == ["Lofi Beats"]
