"""
Tests for building and selling houses and hotels.
"""

import pytest

from bdmonopoly.money import EventType


def test_build_requires_full_color_group(basic_game, give_property):
    """
    Rule: 'A house can only be built when the player owns every property of the colour group.'
    """
    give_property(basic_game, 0, 1)

    assert not basic_game.can_build_house(0, 1)
    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "incomplete_group"
    assert basic_game.property_ownership[1].houses == 0


def test_build_rejected_when_opponent_holds_group_member(basic_game, give_property):
    give_property(basic_game, 0, 1)
    give_property(basic_game, 1, 3)

    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "incomplete_group"


def test_build_house(basic_game, give_property):
    give_property(basic_game, 0, 1, 3)

    assert basic_game.build_house(0, 1)

    assert basic_game.property_ownership[1].houses == 1
    assert basic_game.players[0].cash == 14000
    built = basic_game.event_log.of_type(EventType.BUILD_HOUSE)[-1]
    assert built.details["cost"] == 1000
    assert built.details["houses"] == 1


def test_build_not_owner(basic_game, give_property):
    give_property(basic_game, 1, 1, 3)

    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "not_owner"


def test_build_on_non_property(basic_game, give_property):
    give_property(basic_game, 0, 5, 15, 25, 35)

    assert not basic_game.build_house(0, 5)
    assert basic_game.last_rejection == "not_a_property"
    assert not basic_game.build_house(0, 4)


def test_even_building(basic_game, give_property):
    """
    Rule: 'Houses are built evenly: no property may get ahead of its group by more than one.'
    """
    give_property(basic_game, 0, 1, 3)
    assert basic_game.build_house(0, 1)

    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "uneven_building"

    assert basic_game.build_house(0, 3)
    assert basic_game.build_house(0, 1)
    assert basic_game.property_ownership[1].houses == 2
    assert basic_game.property_ownership[3].houses == 1


def test_build_rejected_on_mortgaged_property(basic_game, give_property):
    give_property(basic_game, 0, 1, 3)
    basic_game.property_ownership[1].is_mortgaged = True

    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "mortgaged"


def test_build_insufficient_cash(basic_game, give_property):
    give_property(basic_game, 0, 1, 3)
    basic_game.players[0].cash = 999

    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "insufficient_cash"
    assert basic_game.players[0].cash == 999
    assert basic_game.property_ownership[1].houses == 0


def test_fifth_build_is_hotel(basic_game, give_property):
    """
    Rule: 'On a property with four houses the next build is a hotel, which replaces the houses.'
    """
    give_property(basic_game, 0, 1, 3, houses=4)

    assert basic_game.build_house(0, 1)

    ownership = basic_game.property_ownership[1]
    assert ownership.has_hotel
    assert ownership.houses == 0
    assert basic_game.players[0].cash == 15000 - 5000
    assert basic_game.event_log.of_type(EventType.BUILD_HOTEL)


def test_hotel_sibling_does_not_block_building(basic_game, give_property):
    give_property(basic_game, 0, 1, has_hotel=True)
    give_property(basic_game, 0, 3, houses=4)

    assert basic_game.build_house(0, 3)
    assert basic_game.property_ownership[3].has_hotel


def test_no_building_past_hotel(basic_game, give_property):
    give_property(basic_game, 0, 1, 3, has_hotel=True)

    assert not basic_game.build_house(0, 1)
    assert basic_game.last_rejection == "max_improvements"


def test_sell_house_refunds_half(basic_game, give_property):
    give_property(basic_game, 0, 1, 3, houses=1)

    assert basic_game.sell_house(0, 1)

    assert basic_game.property_ownership[1].houses == 0
    assert basic_game.players[0].cash == 15500


def test_sell_hotel_returns_four_houses(basic_game, give_property):
    give_property(basic_game, 0, 1, 3, has_hotel=True)

    assert basic_game.sell_house(0, 1)

    ownership = basic_game.property_ownership[1]
    assert not ownership.has_hotel
    assert ownership.houses == 4
    assert basic_game.players[0].cash == 17500
    sold = basic_game.event_log.of_type(EventType.SELL_BUILDING)[-1]
    assert sold.details["building"] == "hotel"


def test_even_selling(basic_game, give_property):
    give_property(basic_game, 0, 1, houses=2)
    give_property(basic_game, 0, 3, houses=1)

    assert not basic_game.sell_house(0, 3)
    assert basic_game.last_rejection == "uneven_selling"

    assert basic_game.sell_house(0, 1)
    assert basic_game.property_ownership[1].houses == 1


def test_sell_without_buildings(basic_game, give_property):
    give_property(basic_game, 0, 1, 3)

    assert not basic_game.sell_house(0, 1)
    assert basic_game.last_rejection == "no_improvements"


@pytest.mark.parametrize("builds", [1, 3, 5, 9, 10])
def test_houses_and_hotel_never_coexist(basic_game, give_property, builds):
    give_property(basic_game, 0, 1, 3)
    basic_game.players[0].cash = 100000

    done = 0
    while done < builds:
        for position in (1, 3):
            if done < builds and basic_game.build_house(0, position):
                done += 1

    for position in (1, 3):
        ownership = basic_game.property_ownership[position]
        assert not (ownership.has_hotel and ownership.houses > 0)
