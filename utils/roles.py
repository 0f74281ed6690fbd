# Highest privilege first. Every caller that needs "the" role of an account goes through primary_role.
ROLE_PRIORITY = ("super_admin", "administrator", "instructor", "game_master", "member")

DEFAULT_ROLES = list(reversed(ROLE_PRIORITY))


def role_names(roles):
    names = []
    for role in roles or []:
        name = role if isinstance(role, str) else getattr(role, "name", None)
        if name:
            names.append(name)
    return names


def primary_role(roles):
    """
    Picks the highest-priority known role, else the first role listed, else None.
    """
    names = role_names(roles)
    for candidate in ROLE_PRIORITY:
        if candidate in names:
            return candidate
    return names[0] if names else None
