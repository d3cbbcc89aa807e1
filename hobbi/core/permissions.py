from hobbi.core.exceptions import Forbidden


def assert_owner(resource, actor) -> None:
    """Raise Forbidden unless actor owns resource (matched on user_id)"""
    if resource.user_id != actor.id:
        raise Forbidden()
