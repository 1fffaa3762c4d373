"""
Shared family trees for the layout tests.
Records use the camelCase shape callers hand to the layout.
"""

import pytest


def person(member_id, gender, **relations):
    record = {"id": member_id, "gender": gender, "label": "", "isEgo": False}
    record.update(relations)
    return record


@pytest.fixture
def default_tree():
    return [
        person("self", "female", isEgo=True, partnerId="partner", parentIds=["dad", "mom"]),
        person("partner", "male", partnerId="self"),
        person("mom", "female", partnerId="dad", childIds=["self"], parentIds=["mat. grandpa", "mat. grandma"]),
        person("dad", "male", partnerId="mom", childIds=["self"], parentIds=["pat. grandpa", "pat. grandma"]),
        person("pat. grandpa", "male", partnerId="pat. grandma", childIds=["dad"]),
        person("pat. grandma", "female", partnerId="pat. grandpa", childIds=["dad"]),
        person("mat. grandpa", "male", partnerId="mat. grandma", childIds=["mom"]),
        person("mat. grandma", "female", partnerId="mat. grandpa", childIds=["mom"]),
    ]


@pytest.fixture
def maternal_uncle_tree():
    return [
        person("self", "female", isEgo=True, partnerId="partner", parentIds=["dad", "mom"]),
        person("partner", "male", partnerId="self"),
        person("dad", "male", partnerId="mom", childIds=["self"], parentIds=["pat. grandpa", "pat. grandma"]),
        person("mom", "female", partnerId="dad", childIds=["self"], parentIds=["mat. grandpa", "mat. grandma"]),
        person("mat. uncle", "male", parentIds=["mat. grandpa", "mat. grandma"]),
        person("pat. grandpa", "male", partnerId="pat. grandma", childIds=["dad"]),
        person("pat. grandma", "female", partnerId="pat. grandpa", childIds=["dad"]),
        person("mat. grandpa", "male", partnerId="mat. grandma", childIds=["mom", "mat. uncle"]),
        person("mat. grandma", "female", partnerId="mat. grandpa", childIds=["mom", "mat. uncle"]),
    ]


@pytest.fixture
def ex_partner_tree():
    return [
        person("self", "male", isEgo=True, parentIds=["dad", "mom"]),
        person(
            "mom", "female", partnerId="dad", exPartnerId="mom`s ex", childIds=["self"],
            parentIds=["mat. grandpa", "mat. grandma"],
        ),
        person(
            "dad", "male", partnerId="mom", exPartnerId="dad`s ex", childIds=["self"],
            parentIds=["pat. grandpa", "pat. grandma"],
        ),
        person("pat. uncle", "male", parentIds=["pat. grandpa", "pat. grandma"]),
        person("mom`s ex", "male", exPartnerId="mom"),
        person("dad`s ex", "female", exPartnerId="dad"),
        person("mat. aunt", "female", parentIds=["mat. grandpa", "mat. grandma"]),
        person("pat. grandpa", "male", partnerId="pat. grandma", childIds=["dad", "pat. uncle"]),
        person("pat. grandma", "female", partnerId="pat. grandpa", childIds=["pat. uncle", "dad"]),
        person("mat. grandpa", "male", partnerId="mat. grandma", childIds=["mom", "mat. aunt"]),
        person("mat. grandma", "female", partnerId="mat. grandpa", childIds=["mom", "mat. aunt"]),
    ]


@pytest.fixture
def nieces_tree():
    return [
        person("self", "male", isEgo=True, partnerId="partner", childIds=["son"], parentIds=["dad", "mom"]),
        person("partner", "female", partnerId="self", childIds=["son"]),
        person("son", "male", parentIds=["self", "partner"]),
        person("sister", "female", parentIds=["dad", "mom"]),
        person("brother", "male", partnerId="brother`s partner", childIds=["niece"], parentIds=["dad", "mom"]),
        person("brother`s partner", "female", partnerId="brother", childIds=["niece"]),
        person("niece", "female", parentIds=["brother", "brother`s partner"]),
        person(
            "mom", "female", partnerId="dad", childIds=["self", "sister", "brother"],
            parentIds=["mat. grandpa", "mat. grandma"],
        ),
        person(
            "dad", "male", partnerId="mom", childIds=["self", "sister", "brother"],
            parentIds=["pat. grandpa", "pat. grandma"],
        ),
        person("pat. grandpa", "male", partnerId="pat. grandma", childIds=["dad"]),
        person("pat. grandma", "female", partnerId="pat. grandpa", childIds=["dad"]),
        person("mat. grandpa", "male", partnerId="mat. grandma", childIds=["mom"]),
        person("mat. grandma", "female", partnerId="mat. grandpa", childIds=["mom"]),
    ]


@pytest.fixture
def cousins_tree():
    return [
        person("self", "male", isEgo=True, parentIds=["dad", "mom"]),
        person("mom", "female", partnerId="dad", childIds=["self"], parentIds=["mat. grandpa", "mat. grandma"]),
        person(
            "mat. aunt", "female", partnerId="mat. aunt partner", childIds=["mat. cousin"],
            parentIds=["mat. grandpa", "mat. grandma"],
        ),
        person("mat. aunt partner", "male", partnerId="mat. aunt", childIds=["mat. cousin"]),
        person("mat. cousin", "female", parentIds=["mat. aunt", "mat. aunt partner"]),
        person("dad", "male", partnerId="mom", childIds=["self"], parentIds=["pat. grandpa", "pat. grandma"]),
        person(
            "pat. uncle", "male", partnerId="pat. uncle partner", childIds=["pat. cousin"],
            parentIds=["pat. grandpa", "pat. grandma"],
        ),
        person("pat. uncle partner", "female", partnerId="pat. uncle", childIds=["pat. cousin"]),
        person("pat. cousin", "male", parentIds=["pat. uncle", "pat. uncle partner"]),
        person("pat. grandpa", "male", partnerId="pat. grandma", childIds=["dad", "pat. uncle"]),
        person("pat. grandma", "female", partnerId="pat. grandpa", childIds=["dad", "pat. uncle"]),
        person("mat. grandpa", "male", partnerId="mat. grandma", childIds=["mom", "mat. aunt"]),
        person("mat. grandma", "female", partnerId="mat. grandpa", childIds=["mom", "mat. aunt"]),
    ]


@pytest.fixture
def complex_tree():
    children = ["son1", "daughter1", "son2", "daughter2"]
    return [
        person("self", "female", isEgo=True, partnerId="partner", parentIds=["dad", "mom"], childIds=children),
        person("partner", "male", partnerId="self", childIds=children),
        person(
            "pat. uncle", "male", partnerId="pat. uncle partner", parentIds=["pat. grandpa", "pat. grandma"],
            childIds=["pat. uncle cousin"],
        ),
        person("pat. uncle partner", "female", partnerId="pat. uncle", childIds=["pat. uncle cousin"]),
        person(
            "dad", "male", partnerId="mom", exPartnerId="dad`s ex",
            childIds=["self", "sister", "brother1", "brother2", "half brother"],
            parentIds=["pat. grandpa", "pat. grandma"],
        ),
        person(
            "mom", "female", partnerId="dad", exPartnerId="mom`s ex",
            childIds=["self", "sister", "brother1", "brother2", "half sister"],
            parentIds=["mat. grandpa", "mat. grandma"],
        ),
        person("dad`s ex", "female", exPartnerId="dad", childIds=["half brother"]),
        person("mom`s ex", "male", exPartnerId="mom", childIds=["half sister"]),
        person("sister", "female", parentIds=["mom", "dad"]),
        person("brother1", "male", parentIds=["mom", "dad"]),
        person("brother2", "male", parentIds=["mom", "dad"]),
        person("half sister", "female", parentIds=["mom", "mom`s ex"]),
        person("half brother", "male", parentIds=["dad", "dad`s ex"]),
        person("mat. aunt", "female", parentIds=["mat. grandpa", "mat. grandma"]),
        person("mat. aunt2", "female", parentIds=["mat. grandpa", "mat. grandma"]),
        person("pat. grandpa", "male", partnerId="pat. grandma", childIds=["dad", "pat. uncle"]),
        person("pat. grandma", "female", partnerId="pat. grandpa", childIds=["pat. uncle", "dad"]),
        person("mat. grandpa", "male", partnerId="mat. grandma", childIds=["mom", "mat. aunt", "mat. aunt2"]),
        person("mat. grandma", "female", partnerId="mat. grandpa", childIds=["mom", "mat. aunt", "mat. aunt2"]),
        person("son1", "male", partnerId="son1 partner", childIds=["granddaughter"], parentIds=["self", "partner"]),
        person("son1 partner", "female", partnerId="son1", childIds=["granddaughter"]),
        person("daughter1", "female", parentIds=["self", "partner"]),
        person("daughter2", "female", parentIds=["self", "partner"]),
        person("son2", "male", parentIds=["self", "partner"]),
        person("granddaughter", "female", parentIds=["son1", "son1 partner"]),
        person("pat. uncle cousin", "female", parentIds=["pat. uncle", "pat. uncle partner"]),
    ]


@pytest.fixture
def all_trees(default_tree, maternal_uncle_tree, ex_partner_tree, nieces_tree, cousins_tree, complex_tree):
    return {
        "default": default_tree,
        "maternal_uncle": maternal_uncle_tree,
        "ex_partner": ex_partner_tree,
        "nieces": nieces_tree,
        "cousins": cousins_tree,
        "complex": complex_tree,
    }
