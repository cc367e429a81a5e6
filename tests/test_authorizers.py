from chocolate import AuthorizerSet


def test_add_is_idempotent_and_sorted(storage, accounts):
    authorizers = AuthorizerSet(storage)
    for account in (accounts.eve, accounts.alice, accounts.charlie, accounts.alice):
        authorizers.add(account)
    members = authorizers.members()
    assert members == sorted([accounts.eve, accounts.alice, accounts.charlie])
    assert len(authorizers) == 3


def test_add_reports_new_members(storage, accounts):
    authorizers = AuthorizerSet(storage)
    assert authorizers.add(accounts.bob) is True
    assert authorizers.add(accounts.bob) is False


def test_contains(storage, accounts):
    authorizers = AuthorizerSet(storage)
    assert not authorizers.contains(accounts.bob)
    authorizers.add(accounts.bob)
    assert authorizers.contains(accounts.bob)
    assert accounts.bob in authorizers
    assert accounts.charlie not in authorizers
