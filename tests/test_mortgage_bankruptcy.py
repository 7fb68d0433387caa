"""
Tests for mortgages, bankruptcy and net worth.
"""

from bdmonopoly.cards import Card, GetOutOfJailFree
from bdmonopoly.game import create_game
from bdmonopoly.money import EventType


def test_mortgage_property(basic_game, give_property):
    """
    Rule: 'Mortgaging pays the owner half the purchase price.'
    """
    give_property(basic_game, 0, 6)

    assert basic_game.mortgage_property(0, 6)

    assert basic_game.property_ownership[6].is_mortgaged
    assert basic_game.players[0].cash == 15500
    assert basic_game.event_log.of_type(EventType.MORTGAGE)[-1].details["amount"] == 500


def test_mortgage_station(basic_game, give_property):
    give_property(basic_game, 0, 5)

    assert basic_game.mortgage_property(0, 5)
    assert basic_game.players[0].cash == 16000


def test_cannot_mortgage_twice(basic_game, give_property):
    give_property(basic_game, 0, 6, mortgaged=True)

    assert not basic_game.mortgage_property(0, 6)
    assert basic_game.last_rejection == "already_mortgaged"


def test_cannot_mortgage_others_property(basic_game, give_property):
    give_property(basic_game, 1, 6)

    assert not basic_game.mortgage_property(0, 6)
    assert basic_game.last_rejection == "not_owner"
    assert not basic_game.mortgage_property(0, 4)
    assert basic_game.last_rejection == "not_ownable"


def test_cannot_mortgage_while_group_has_buildings(basic_game, give_property):
    give_property(basic_game, 0, 1)
    give_property(basic_game, 0, 3, houses=1)

    assert not basic_game.mortgage_property(0, 1)
    assert basic_game.last_rejection == "group_has_improvements"


def test_unmortgage_costs_interest(basic_game, give_property):
    """
    Rule: 'Lifting a mortgage costs the mortgage value plus 10% interest.'
    """
    give_property(basic_game, 0, 6)
    basic_game.mortgage_property(0, 6)

    assert basic_game.unmortgage_cost(6) == 550
    assert basic_game.unmortgage_property(0, 6)

    assert not basic_game.property_ownership[6].is_mortgaged
    assert basic_game.players[0].cash == 15500 - 550


def test_unmortgage_insufficient_cash(basic_game, give_property):
    give_property(basic_game, 0, 6, mortgaged=True)
    basic_game.players[0].cash = 100

    assert not basic_game.unmortgage_property(0, 6)
    assert basic_game.last_rejection == "insufficient_cash"
    assert basic_game.property_ownership[6].is_mortgaged


def test_unmortgage_not_mortgaged(basic_game, give_property):
    give_property(basic_game, 0, 6)

    assert not basic_game.unmortgage_property(0, 6)
    assert basic_game.last_rejection == "not_mortgaged"


def test_bankruptcy_to_creditor(basic_game, give_property):
    """
    Rule: 'A player bankrupted by another hands over all remaining cash
    and every property, unmortgaged.'
    """
    give_property(basic_game, 0, 1, 3, houses=2)
    give_property(basic_game, 0, 5, mortgaged=True)
    basic_game.players[0].cash = 300

    basic_game.declare_bankruptcy(0, 1)

    alice, bob = basic_game.players[0], basic_game.players[1]
    assert alice.is_bankrupt
    assert alice.cash == 0
    assert alice.properties == set()
    # 300 cash plus four houses sold back at 500 each
    assert bob.cash == 15000 + 300 + 2000
    assert bob.properties == {1, 3, 5}
    for position in (1, 3, 5):
        ownership = basic_game.property_ownership[position]
        assert ownership.owner_id == 1
        assert not ownership.is_mortgaged
        assert ownership.houses == 0
    assert basic_game.game_over
    assert basic_game.winner == 1


def test_bankruptcy_to_bank(three_player_game, give_property):
    """
    Rule: 'A player bankrupted by the bank loses everything: properties
    return unowned and cash is discarded.'
    """
    game = three_player_game
    give_property(game, 0, 6, 8)
    game.players[0].cash = 5000

    game.declare_bankruptcy(0, None)

    assert game.players[0].is_bankrupt
    assert game.players[0].cash == 0
    assert game.property_ownership[6].owner_id is None
    assert game.property_ownership[8].owner_id is None
    assert game.players[1].cash == 15000
    assert game.players[2].cash == 15000
    assert not game.game_over
    assert game.get_current_player().player_id == 1


def test_bankrupt_creditor_is_treated_as_bank(three_player_game, give_property):
    game = three_player_game
    game.force_bankruptcy(2)
    give_property(game, 1, 6)

    game.declare_bankruptcy(1, 2)

    assert game.property_ownership[6].owner_id is None
    assert game.players[2].cash == 0


def test_rent_bankruptcy_transfers_to_owner(basic_game, give_property):
    give_property(basic_game, 0, 1, 3, has_hotel=True)
    give_property(basic_game, 1, 6)
    basic_game.players[1].cash = 1000

    basic_game.teleport(1, 1)

    bob = basic_game.players[1]
    assert bob.is_bankrupt
    assert bob.cash == 0
    # Bob could only cover 1000 of the 2500 hotel rent
    assert basic_game.players[0].cash == 15000 + 1000
    assert basic_game.property_ownership[6].owner_id == 0
    assert basic_game.winner == 0
    bankruptcy = basic_game.event_log.of_type(EventType.BANKRUPTCY)[-1]
    assert bankruptcy.details["creditor"] == 0
    assert bankruptcy.details["cash_transferred"] == -1500


def test_rent_bankruptcy_conserves_cash(basic_game, give_property):
    """
    Rule: 'The creditor receives what the bankrupt player had, including
    buildings sold back to the bank, and no more.'
    """
    give_property(basic_game, 0, 39)
    give_property(basic_game, 1, 6, 8, 9, houses=1)
    basic_game.players[1].cash = 100
    total_before = basic_game.players[0].cash + basic_game.players[1].cash

    basic_game.teleport(1, 39)

    liquidated = 3 * (basic_game.config.house_cost // 2)
    assert basic_game.players[1].is_bankrupt
    assert basic_game.players[1].cash == 0
    assert basic_game.players[0].cash == total_before + liquidated
    transfer = basic_game.event_log.of_type(EventType.TRANSFER)[-1]
    assert transfer.player_id == 1
    assert transfer.details == {"to": 0, "cash": 100 - 500 + liquidated, "properties": [6, 8, 9]}


def test_negative_cash_always_ends_in_bankruptcy(basic_game):
    basic_game.players[0].cash = 500

    basic_game.pay_tax(0, 2000)

    assert basic_game.players[0].is_bankrupt
    assert basic_game.players[0].cash == 0


def test_give_cash_negative_bankrupts(basic_game):
    basic_game.give_cash(0, -20000)

    assert basic_game.players[0].is_bankrupt


def test_bankruptcy_returns_held_jail_card(game_config, two_players):
    card = Card("Bail granted. Get out of Thana free.", GetOutOfJailFree())
    game = create_game(game_config, two_players, event_cards=[card])
    game.teleport(0, 7)

    game.force_bankruptcy(0)

    assert game.players[0].get_out_of_jail_cards == 0
    assert game.event_deck.held_cards == []
    assert game.event_deck.discard_pile == [card]


def test_net_worth_and_standings(basic_game, give_property):
    give_property(basic_game, 0, 1, houses=2)

    assert basic_game.net_worth(0) == 15000 + 600 + 2000

    standings = basic_game.standings()
    assert [row["name"] for row in standings] == ["Alice", "Bob"]

    basic_game.force_bankruptcy(0)
    assert basic_game.standings()[-1]["is_bankrupt"]


def test_describe_tile(basic_game, give_property):
    give_property(basic_game, 0, 6, 8, 9)

    info = basic_game.describe_tile(9, language="bn")

    assert info["name"] == "ফার্মগেট"
    assert info["group"] == "light_blue"
    assert info["owner"] == 0
    assert info["current_rent"] == 160
    assert info["mortgage_value"] == 600
