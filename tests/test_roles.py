from utils.roles import ROLE_PRIORITY, primary_role


def test_highest_priority_role_wins():
    assert primary_role(["member", "instructor"]) == "instructor"
    assert primary_role(["game_master", "administrator", "member"]) == "administrator"
    assert primary_role(list(reversed(ROLE_PRIORITY))) == "super_admin"


def test_unknown_roles_fall_back_to_first():
    assert primary_role(["quartermaster", "medic"]) == "quartermaster"


def test_no_roles():
    assert primary_role([]) is None
    assert primary_role(None) is None
