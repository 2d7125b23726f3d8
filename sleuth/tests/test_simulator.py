"""
Tests for the simulator.

Tests:
- Data set generation
- Answer resolution (what the asker and observers learn)
- Question policies
- Active player rotation
"""

import logging
import random

import pytest

from ..engine_core.cards import CardCategory, cards_by_category
from ..engine_core.errors import DataSetError, StrategyUsageError
from ..engine_core.evaluator import DeductionEngine
from ..engine_core.knowledge import not_clear_cards
from ..engine_core.turns import Answer, Question, TurnLog
from ..simulator import (
    BasicQuestionPolicy,
    EvaluationQuestionPolicy,
    GameDataSet,
    GameSimulator,
    QuestionStrategy,
    TableInfo,
    build_question,
    perform_basic_player_evaluation,
)


@pytest.fixture
def fixed_data_set(nine_cards, three_players) -> GameDataSet:
    """
    Anna: r1 s1, Ben: r2 t1, Chris: s2 t2; solution r3 s3 t3.
    """
    c = nine_cards
    anna, ben, chris = three_players
    return GameDataSet(
        players=tuple(three_players),
        all_cards=frozenset(c.values()),
        solution_cards=frozenset({c["r3"], c["s3"], c["t3"]}),
        leftover_cards=frozenset(),
        player_cards={
            anna: frozenset({c["r1"], c["s1"]}),
            ben: frozenset({c["r2"], c["t1"]}),
            chris: frozenset({c["s2"], c["t2"]}),
        },
    )


@pytest.fixture
def simulator(fixed_data_set) -> GameSimulator:
    return GameSimulator(fixed_data_set, rng=random.Random(5))


class TestGameDataSet:
    """Tests for dealing a simulated game."""

    def test_small_catalog_three_players(self, small_cards, three_players):
        data_set = GameDataSet.generate_default(small_cards, three_players, rng=random.Random(1))

        assert len(data_set.solution_cards) == 3
        assert {card.category for card in data_set.solution_cards} == set(CardCategory)
        assert data_set.leftover_cards == frozenset()
        assert data_set.hand_size == 2
        assert all(len(hand) == 2 for hand in data_set.player_cards.values())

    def test_standard_catalog_five_players(self, standard_cards, five_players):
        data_set = GameDataSet.generate_default(standard_cards, five_players, rng=random.Random(2))

        assert len(data_set.leftover_cards) == 3
        assert data_set.hand_size == 3

    def test_partition_covers_catalog(self, standard_cards, five_players):
        data_set = GameDataSet.generate_default(standard_cards, five_players, rng=random.Random(3))

        dealt = [card for hand in data_set.player_cards.values() for card in hand]
        assert len(dealt) == len(set(dealt))
        everything = set(dealt) | data_set.solution_cards | data_set.leftover_cards
        assert everything == set(standard_cards)
        assert not data_set.solution_cards & data_set.leftover_cards

    def test_seeded_runs_repeat(self, standard_cards, five_players):
        first = GameDataSet.generate_default(standard_cards, five_players, rng=random.Random(9))
        second = GameDataSet.generate_default(standard_cards, five_players, rng=random.Random(9))
        assert first == second
        assert first.player_cards == second.player_cards

    def test_too_few_cards(self, six_cards, four_players):
        with pytest.raises(DataSetError):
            GameDataSet.generate_default(six_cards.values(), four_players, rng=random.Random(0))

    def test_missing_category(self, standard_cards, five_players):
        no_tools = [card for card in standard_cards if card.category != CardCategory.TOOL]
        with pytest.raises(DataSetError):
            GameDataSet.generate_default(no_tools, five_players)

    def test_unshuffled_deal_in_id_order(self, small_cards, three_players):
        data_set = GameDataSet.generate_default(
            small_cards, three_players, shuffled=False, rng=random.Random(4)
        )
        remaining = sorted(
            (card for card in small_cards if card not in data_set.solution_cards),
            key=lambda card: card.id,
        )
        anna = three_players[0]
        assert data_set.player_cards[anna] == frozenset(remaining[:2])

    def test_own_cards_and_holder(self, fixed_data_set, nine_cards, three_players):
        anna, ben = three_players[:2]
        assert fixed_data_set.own_player() == anna
        assert fixed_data_set.own_cards() == {nine_cards["r1"], nine_cards["s1"]}
        assert fixed_data_set.holder_of(nine_cards["t1"]) == ben
        assert fixed_data_set.holder_of(nine_cards["t3"]) is None

    def test_missing_own_hand(self, nine_cards, three_players):
        data_set = GameDataSet(
            players=tuple(three_players),
            all_cards=frozenset(nine_cards.values()),
            solution_cards=frozenset(),
            leftover_cards=frozenset(),
        )
        with pytest.raises(DataSetError):
            data_set.own_cards()

    def test_describe(self, fixed_data_set):
        lines = fixed_data_set.describe()
        assert lines[0] == "[SC] ['r3', 's3', 't3']"
        assert lines[1] == "[LO] []"
        assert lines[2].startswith("[P]  Anna")
        assert lines[2].endswith("['r1', 's1']")
        assert len(lines) == 5


class TestAnswerResolution:
    """Tests for who answers and what is revealed."""

    def test_viewpoint_asker_sees_the_card(self, simulator, three_players, nine_cards):
        anna, ben = three_players[:2]
        c = nine_cards
        answer = simulator.resolve_answer(Question.of(anna, c["r2"], c["s2"], c["t3"]))
        assert answer == Answer(ben, {c["r2"]})

    def test_first_match_in_category_order(self, simulator, three_players, nine_cards):
        anna, ben = three_players[:2]
        c = nine_cards
        answer = simulator.resolve_answer(Question.of(anna, c["r2"], c["s3"], c["t1"]))
        assert answer.cards == {c["r2"]}

    def test_observers_see_the_whole_question(self, simulator, three_players, nine_cards):
        anna, ben, chris = three_players
        c = nine_cards
        question = Question.of(ben, c["r1"], c["s2"], c["t3"])
        answer = simulator.resolve_answer(question)
        assert answer.answering_player == chris
        assert answer.cards == question.cards

    def test_search_wraps_around(self, simulator, three_players, nine_cards):
        """Chris asks: Anna holds nothing asked, so Ben answers."""
        anna, ben, chris = three_players
        c = nine_cards
        answer = simulator.resolve_answer(Question.of(chris, c["r2"], c["s2"], c["t3"]))
        assert answer.answering_player == ben

    def test_asker_never_answers(self, simulator, three_players, nine_cards):
        """Chris's own s2 does not count."""
        chris = three_players[2]
        c = nine_cards
        assert simulator.resolve_answer(Question.of(chris, c["r3"], c["s2"], c["t3"])) is None

    def test_nobody_holds_any(self, simulator, three_players, nine_cards):
        anna = three_players[0]
        c = nine_cards
        assert simulator.resolve_answer(Question.of(anna, c["r3"], c["s3"], c["t3"])) is None


class TestNextTurn:
    """Tests for round rotation and strategy selection."""

    def test_active_player_rotates(self, simulator, three_players):
        log = TurnLog()
        for expected in three_players + three_players[:1]:
            question, answer = simulator.next_turn(log.as_list())
            assert question.asking_player == expected
            log.append(question, answer)

    def test_evaluation_strategy_needs_result(self, simulator):
        with pytest.raises(StrategyUsageError):
            simulator.next_turn([], strategy=QuestionStrategy.EVALUATION_BASED)

    def test_other_players_ask_with_basic_policy(self, simulator, three_players):
        """Ben's turn ignores the evaluation strategy, so no result is needed."""
        log = TurnLog()
        question, answer = simulator.next_turn([])
        log.append(question, answer)

        question, _ = simulator.next_turn(log.as_list(), strategy=QuestionStrategy.EVALUATION_BASED)
        assert question.asking_player == three_players[1]

    def test_evaluation_strategy(self, simulator, fixed_data_set, three_players):
        engine = DeductionEngine.create(
            fixed_data_set.players,
            fixed_data_set.all_cards,
            fixed_data_set.leftover_cards,
            fixed_data_set.own_cards(),
        )
        result = engine.update_matrix_from_turns([]).results()
        question, _ = simulator.next_turn(
            [], strategy=QuestionStrategy.EVALUATION_BASED, evaluation_result=result
        )
        assert question.asking_player == three_players[0]
        assert question.cards <= set(not_clear_cards(result.matrix))

    def test_seeded_simulators_agree(self, fixed_data_set):
        first = GameSimulator(fixed_data_set, rng=random.Random(11))
        second = GameSimulator(fixed_data_set, rng=random.Random(11))
        assert first.next_turn([]) == second.next_turn([])

    def test_diagnostics_for_viewpoint_turns(self, fixed_data_set, caplog):
        logger = logging.getLogger("sleuth.test.simulator")
        with caplog.at_level(logging.DEBUG, logger="sleuth.test.simulator"):
            sim = GameSimulator(fixed_data_set, rng=random.Random(1), diagnostics=logger)
            sim.next_turn([])
        assert "[SC]" in caplog.text
        assert "[Question](0)" in caplog.text
        assert "[Answer](0)" in caplog.text


class TestQuestionPolicies:
    """Tests for the question policies and the private evaluation."""

    @pytest.fixture
    def table(self, fixed_data_set) -> TableInfo:
        return TableInfo(
            players=fixed_data_set.players,
            all_cards=fixed_data_set.all_cards,
            leftover_cards=fixed_data_set.leftover_cards,
            hand_size=2,
        )

    def test_private_evaluation_learns_exact_answers(self, table, three_players, nine_cards):
        anna, ben, chris = three_players
        c = nine_cards
        log = TurnLog()
        log.append(Question.of(anna, c["r2"], c["s3"], c["t3"]), Answer(ben, {c["r2"]}))
        log.append(Question.of(ben, c["r1"], c["s2"], c["t3"]), Answer(chris, {c["r1"], c["s2"], c["t3"]}))

        view = perform_basic_player_evaluation(anna, {c["r1"], c["s1"]}, table, log.as_list())

        assert view.known_cards(ben) == {c["r2"]}
        assert view.known_cards(chris) == set()
        assert view.cards_of_others(anna) == {c["r2"]}

    def test_private_evaluation_empty_answer(self, table, three_players, nine_cards):
        anna = three_players[0]
        c = nine_cards
        log = TurnLog()
        log.append(Question.of(anna, c["r1"], c["s3"], c["t3"]), None)

        view = perform_basic_player_evaluation(anna, {c["r1"], c["s1"]}, table, log.as_list())

        assert view.solution_cards == {c["s3"], c["t3"]}

    def test_basic_policy_prefers_open_cards(self, table, three_players, nine_cards):
        anna = three_players[0]
        c = nine_cards
        policy = BasicQuestionPolicy(rng=random.Random(0))
        decision = policy.select_question(anna, frozenset({c["r1"], c["s1"]}), table, [])
        assert not decision.question.cards & {c["r1"], c["s1"]}
        assert len(decision.priority_groups) == 5

    def test_basic_policy_falls_back_to_own_cards(self, table, three_players, nine_cards):
        """Only own cards are left for rooms once every other room is known."""
        anna, ben, chris = three_players
        c = nine_cards
        log = TurnLog()
        log.append(Question.of(anna, c["r2"], c["s3"], c["t3"]), Answer(ben, {c["r2"]}))
        log.append(Question.of(anna, c["r3"], c["s3"], c["t3"]), Answer(chris, {c["r3"]}))

        policy = BasicQuestionPolicy(rng=random.Random(0))
        decision = policy.select_question(anna, frozenset({c["r1"], c["s1"]}), table, log.as_list())
        assert decision.question.card_for(CardCategory.ROOM) == c["r1"]

    def test_evaluation_policy_requires_result(self, table, three_players):
        with pytest.raises(StrategyUsageError):
            EvaluationQuestionPolicy().select_question(three_players[0], frozenset(), table, [])

    def test_build_question(self, three_players, nine_cards):
        c = nine_cards
        question = build_question(
            three_players[0],
            [[c["t2"]], [c["r3"], c["t1"]], cards_by_category(c.values())[CardCategory.SUBJECT]],
        )
        assert question.cards == {c["t2"], c["r3"], c["s1"]}
