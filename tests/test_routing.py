from promptdeck.routing import (
    HashLocation,
    LandingRoute,
    ListRoute,
    ModalRoute,
    category_for_prompt_id,
    list_fragment,
    parse_route,
    prompt_fragment,
)


def test_parse_landing_routes() -> None:
    assert parse_route("") == LandingRoute()
    assert parse_route("#") == LandingRoute()


def test_parse_list_routes() -> None:
    assert parse_route("#students") == ListRoute("student")
    assert parse_route("#advisors") == ListRoute("advisor")
    assert parse_route("#study-guides") == ListRoute("study-guides")
    assert parse_route("#student-wellness") == ListRoute("student-wellness")


def test_parse_prompt_route() -> None:
    assert parse_route("#prompt/student-wellness-1") == ModalRoute("student-wellness-1")


def test_unknown_routes_parse_to_none() -> None:
    assert parse_route("#student") is None
    assert parse_route("#prompt/") is None
    assert parse_route("#nowhere") is None


def test_fragment_builders_round_trip() -> None:
    for category in ("student", "advisor", "study-guides", "student-wellness"):
        assert parse_route(list_fragment(category)) == ListRoute(category)
    assert parse_route(prompt_fragment("advisor-3")) == ModalRoute("advisor-3")


def test_category_prefix_priority() -> None:
    assert category_for_prompt_id("student-wellness-2") == "student-wellness"
    assert category_for_prompt_id("student-prompt-1") == "student"
    assert category_for_prompt_id("advisor-prompt-4") == "advisor"
    assert category_for_prompt_id("study-guide-7") == "study-guides"
    assert category_for_prompt_id("mystery-1") is None


def test_assigning_same_fragment_does_not_notify() -> None:
    location = HashLocation("#students")
    calls: list[str] = []
    location.subscribe(lambda: calls.append(location.fragment))

    location.assign("#students")
    assert calls == []

    location.assign("#advisors")
    assert calls == ["#advisors"]


def test_hash_and_empty_are_the_same_location() -> None:
    location = HashLocation("")
    calls: list[str] = []
    location.subscribe(lambda: calls.append(location.fragment))
    location.assign("#")
    assert calls == []
    assert location.fragment == ""


def test_nested_navigation_is_queued_not_reentrant() -> None:
    location = HashLocation()
    events: list[str] = []

    def listener() -> None:
        events.append(f"start {location.fragment}")
        if location.fragment == "#bogus":
            location.assign("#")
        events.append(f"end {location.fragment}")

    location.subscribe(listener)
    location.assign("#bogus")
    assert events == ["start #bogus", "end ", "start ", "end "]
