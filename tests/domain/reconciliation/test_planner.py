from __future__ import annotations

from datetime import date

from reelsync.domain.model import Dataset, ExperimentKey, IdentityKey
from reelsync.domain.reconciliation.contracts import (
    CreateExperiment,
    CreateLink,
    CreateMovie,
    IntentKind,
    MatchTier,
    ReviewKind,
    UpdateField,
)
from reelsync.domain.reconciliation.planner import (
    build_plan,
    collect_source_movies,
    merge_source_experiments,
)
from tests.helpers.records import make_experiment, make_movie


def test_likely_match_links_to_the_stored_movie() -> None:
    stored = make_movie("Laughing Dead, The", year="1990")
    source = Dataset.of(
        experiments=[make_experiment("36", movies=[make_movie("The Laughing Dead", year="1989")])]
    )
    reference = Dataset.of(movies=[stored], experiments=[make_experiment("036")])

    plan = build_plan(source, reference)

    assert plan.matches[0].tier is MatchTier.LIKELY
    assert plan.intents == (
        CreateLink(
            movie_key=IdentityKey.title_year("laughing dead, the", "1990"),
            experiment_number="036",
        ),
    )
    assert plan.reviews == ()


def test_existing_links_are_not_planned_again() -> None:
    stored = make_movie("Laughing Dead, The", year="1990")
    source = Dataset.of(
        experiments=[make_experiment("36", movies=[make_movie("The Laughing Dead", year="1989")])]
    )
    reference = Dataset.of(movies=[stored], experiments=[make_experiment("036")])
    links = [(IdentityKey.title_year("laughing dead, the", "1990"), "36")]

    plan = build_plan(source, reference, links)

    assert plan.is_empty


def test_ambiguous_match_is_only_reported() -> None:
    pool = [
        make_movie(f"Q{chr(ord('a') + index)}", year=str(1981 + index % 3)) for index in range(10)
    ]
    source = Dataset.of(experiments=[make_experiment("12", movies=[make_movie("Q", year="1982")])])
    reference = Dataset.of(movies=pool, experiments=[make_experiment("012")])

    plan = build_plan(source, reference)

    assert plan.intents == ()
    assert len(plan.reviews) == 1
    review = plan.reviews[0]
    assert review.kind is ReviewKind.AMBIGUOUS_MATCH
    assert review.experiment_numbers == ("012",)
    assert review.match is not None
    assert review.match.best is pool[1]
    assert review.detail.startswith("10 candidates")


def test_unmatched_movie_and_new_experiment_are_created_in_order() -> None:
    movie = make_movie("Miami Connection", year="1987")
    source = Dataset.of(experiments=[make_experiment("5", host="Tom", movies=[movie])])

    plan = build_plan(source, Dataset())

    assert plan.intents == (
        CreateExperiment(experiment=make_experiment("005", host="Tom")),
        CreateMovie(movie=movie),
        CreateLink(
            movie_key=IdentityKey.title_year("miami connection", "1987"),
            experiment_number="005",
        ),
    )
    assert plan.summary.tiers[MatchTier.UNMATCHED] == 1


def test_loose_source_movies_are_created_without_links() -> None:
    movie = make_movie("Birdemic", year="2010")

    plan = build_plan(Dataset.of(movies=[movie]), Dataset())

    assert plan.intents == (CreateMovie(movie=movie),)


def test_exact_match_fills_missing_external_id() -> None:
    stored = make_movie("Troll 2", year="1990")
    source_movie = make_movie("Troll 2", year="1990", tmdb_id="26914")
    source = Dataset.of(experiments=[make_experiment("10", movies=[source_movie])])
    reference = Dataset.of(movies=[stored], experiments=[make_experiment("010")])

    plan = build_plan(source, reference)

    key = IdentityKey.title_year("troll 2", "1990")
    assert plan.matches[0].tier is MatchTier.EXACT
    assert plan.intents == (
        UpdateField(entity=key, field="tmdb_id", old_value=None, new_value="26914"),
        CreateLink(movie_key=key, experiment_number="010"),
    )


def test_populated_fields_are_never_overwritten() -> None:
    stored = make_movie("Troll 2", year="1990", original_title="Troll 2")
    source_movie = make_movie("Troll 2", year="1990", original_title="Trolls")
    source = Dataset.of(movies=[source_movie])

    plan = build_plan(source, Dataset.of(movies=[stored]))

    assert plan.intents_of(IntentKind.UPDATE_FIELD) == ()
    assert len(plan.reviews) == 1
    conflict = plan.reviews[0]
    assert conflict.kind is ReviewKind.FIELD_CONFLICT
    assert conflict.subject == "title:troll 2|1990"
    assert "original_title" in conflict.detail


def test_equal_values_after_normalization_are_not_conflicts() -> None:
    stored = make_movie("Troll 2", year="1990", original_title="Troll 2")
    source_movie = make_movie("Troll 2", year="1990", original_title="  TROLL 2 ")

    plan = build_plan(Dataset.of(movies=[source_movie]), Dataset.of(movies=[stored]))

    assert plan.is_empty
    assert plan.reviews == ()


def test_experiment_fields_are_filled_in() -> None:
    source = Dataset.of(
        experiments=[
            make_experiment(
                "7",
                event_date=date(2023, 5, 14),
                host="Ann",
                image_url="https://example.org/007.jpg",
            )
        ]
    )
    reference = Dataset.of(
        experiments=[make_experiment("007", image_url="https://example.org/007.jpg")]
    )

    plan = build_plan(source, reference)

    key = ExperimentKey("007")
    assert plan.intents == (
        UpdateField(entity=key, field="event_date", old_value=None, new_value="2023-05-14"),
        UpdateField(entity=key, field="host", old_value=None, new_value="Ann"),
    )


def test_duplicate_creations_within_one_batch_share_a_key() -> None:
    first = make_movie("Miami Connection", year="1987")
    second = make_movie("Miami Connection", year="1988")
    source = Dataset.of(
        experiments=[
            make_experiment("1", movies=[first]),
            make_experiment("2", movies=[second]),
        ]
    )
    reference = Dataset.of(experiments=[make_experiment("001"), make_experiment("002")])

    plan = build_plan(source, reference)

    key = IdentityKey.title_year("miami connection", "1987")
    assert plan.intents == (
        CreateMovie(movie=first),
        CreateLink(movie_key=key, experiment_number="001"),
        CreateLink(movie_key=key, experiment_number="002"),
    )


def test_planner_never_removes_links() -> None:
    stored = make_movie("The Room", year="2003")
    reference = Dataset.of(movies=[stored], experiments=[make_experiment("001")])
    links = [(IdentityKey.title_year("the room", "2003"), "001")]

    plan = build_plan(Dataset(), reference, links)

    assert plan.is_empty
    assert plan.intents_of(IntentKind.REMOVE_LINK) == ()


def test_planning_is_deterministic() -> None:
    source = Dataset.of(
        movies=[make_movie("Birdemic", year="2010")],
        experiments=[
            make_experiment("3", movies=[make_movie("Troll 2", year="1990")]),
            make_experiment("4", movies=[make_movie("Samurai Cop", year="1991")]),
        ],
    )
    reference = Dataset.of(
        movies=[make_movie("Troll 3", year="1990"), make_movie("Samurai Cops", year="1991")],
        experiments=[make_experiment("003")],
    )

    assert build_plan(source, reference) == build_plan(source, reference)


def test_collect_source_movies_dedupes_by_key() -> None:
    room = make_movie("The Room", year="2003")
    source = Dataset.of(
        movies=[room],
        experiments=[
            make_experiment("1", movies=[room, room]),
            make_experiment("2", movies=[make_movie("the room", year="2003")]),
        ],
    )

    collected = collect_source_movies(source)

    assert len(collected) == 1
    assert collected[0].movie is room
    assert collected[0].experiment_numbers == ["001", "002"]


def test_merge_source_experiments_fills_gaps_from_later_rows() -> None:
    merged = merge_source_experiments(
        [
            make_experiment("7", movies=[make_movie("Troll 2")]),
            make_experiment("007", host="Ann", movies=[make_movie("Birdemic")]),
            make_experiment("no number"),
        ]
    )

    assert len(merged) == 1
    assert merged[0].experiment_number == "007"
    assert merged[0].host == "Ann"
    assert [movie.title for movie in merged[0].movies] == ["Troll 2", "Birdemic"]


def test_host_is_filled_only_when_empty() -> None:
    source = Dataset.of(experiments=[make_experiment("8", host="Bob")])

    populated = build_plan(source, Dataset.of(experiments=[make_experiment("008", host="Alice")]))
    empty = build_plan(source, Dataset.of(experiments=[make_experiment("008", host=None)]))

    assert populated.intents_of(IntentKind.UPDATE_FIELD) == ()
    assert [review.kind for review in populated.reviews] == [ReviewKind.FIELD_CONFLICT]
    assert empty.intents == (
        UpdateField(entity=ExperimentKey("008"), field="host", old_value=None, new_value="Bob"),
    )


def test_title_without_comparable_text_is_set_aside() -> None:
    source = Dataset.of(
        experiments=[
            make_experiment(
                "9",
                movies=[make_movie('"', year="2001"), make_movie("Birdemic", year="2010")],
            )
        ]
    )

    plan = build_plan(source, Dataset.of(experiments=[make_experiment("009")]))

    assert plan.intents == (
        CreateMovie(movie=make_movie("Birdemic", year="2010")),
        CreateLink(
            movie_key=IdentityKey.title_year("birdemic", "2010"),
            experiment_number="009",
        ),
    )
    assert len(plan.matches) == 1
    assert len(plan.reviews) == 1
    review = plan.reviews[0]
    assert review.kind is ReviewKind.UNUSABLE_TITLE
    assert review.experiment_numbers == ("009",)


def test_quote_only_title_with_external_id_is_planned() -> None:
    movie = make_movie('"', year="2001", tmdb_id="1234")

    plan = build_plan(Dataset.of(movies=[movie]), Dataset())

    assert plan.intents == (CreateMovie(movie=movie),)
    assert plan.reviews == ()


def test_stored_links_missing_from_the_source_are_reported() -> None:
    room_key = IdentityKey.title_year("the room", "2003")
    birdemic_key = IdentityKey.imdb("tt1316037")
    reference = Dataset.of(
        movies=[make_movie("The Room"), make_movie("Birdemic", year="2010", imdb_id="tt1316037")],
        experiments=[make_experiment("001"), make_experiment("002")],
    )
    links = [(room_key, "1"), (birdemic_key, "001"), (birdemic_key, "002")]
    source = Dataset.of(experiments=[make_experiment("1", movies=[make_movie("The Room")])])

    plan = build_plan(source, reference, links)

    assert plan.is_empty
    assert len(plan.reviews) == 1
    review = plan.reviews[0]
    assert review.kind is ReviewKind.EXTRA_LINK
    assert review.subject == "imdb:tt1316037"
    assert review.experiment_numbers == ("001",)
    assert "reelsync unlink --movie 'imdb:tt1316037' --experiment 001 --confirm" in review.detail


def test_links_of_ambiguous_candidates_are_not_reported_as_extra() -> None:
    pool = [
        make_movie(f"Q{chr(ord('a') + index)}", year=str(1981 + index % 3)) for index in range(10)
    ]
    source = Dataset.of(experiments=[make_experiment("12", movies=[make_movie("Q", year="1982")])])
    reference = Dataset.of(movies=pool, experiments=[make_experiment("012")])
    links = [(IdentityKey.title_year("qb", "1982"), "012")]

    plan = build_plan(source, reference, links)

    assert [review.kind for review in plan.reviews] == [ReviewKind.AMBIGUOUS_MATCH]
