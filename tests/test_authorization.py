from riff.activitypub.authorization import can_delete, can_update, describes_self, is_self_deletion, owns_featured


class TestCanDelete:
    def test_author(self, app, make_actor, make_post):
        alice = make_actor('alice')
        assert can_delete(alice, make_post(alice))

    def test_moderator_on_authors_instance(self, app, make_actor, make_post):
        alice = make_actor('alice')
        assert can_delete(make_actor('admin'), make_post(alice))

    def test_post_hosted_on_actors_instance(self, app, make_actor, make_post):
        alice = make_actor('alice')
        moderator = make_actor('admin', host='mirror.example')
        assert can_delete(moderator, make_post(alice, uri='https://mirror.example/objects/7'))

    def test_moderator_of_destination_community(self, app, make_actor, make_post):
        alice = make_actor('alice')
        post = make_post(alice, addressed_to=['https://lemmy.example/c/music'])
        assert can_delete(make_actor('mod', host='lemmy.example'), post)

    def test_unrelated_actor(self, app, make_actor, make_post):
        alice = make_actor('alice')
        post = make_post(alice, addressed_to=['https://lemmy.example/c/music'])
        assert not can_delete(make_actor('eve', host='evil.example'), post)

    def test_local_actor_has_no_special_powers(self, app, make_actor, make_post):
        alice = make_actor('alice')
        assert not can_delete(make_actor('carol', host='riff.test'), make_post(alice))


class TestCanUpdate:
    def test_only_the_author(self, app, make_actor, make_post):
        alice = make_actor('alice')
        post = make_post(alice)
        assert can_update(alice, post)
        assert not can_update(make_actor('admin'), post)


class TestOwnsFeatured:
    def test_own_collection(self, app, make_actor):
        alice = make_actor('alice')
        assert owns_featured(alice, 'https://remote.example/users/alice/featured')
        assert owns_featured(alice, 'https://REMOTE.example/users/alice/featured')

    def test_other_collection(self, app, make_actor):
        alice = make_actor('alice')
        assert not owns_featured(alice, 'https://remote.example/users/bob/featured')
        assert not owns_featured(alice, None)

    def test_default_collection_uri(self, app, make_actor):
        alice = make_actor('alice', featured_url=None)
        assert owns_featured(alice, alice.uri + '/featured')


class TestSelf:
    def test_self_deletion(self, app):
        assert is_self_deletion('https://remote.example/users/alice', 'https://remote.example/users/alice')
        assert not is_self_deletion('https://remote.example/objects/1', 'https://remote.example/users/alice')
        assert not is_self_deletion(None, 'https://remote.example/users/alice')

    def test_describes_self(self, app, make_actor):
        alice = make_actor('alice')
        assert describes_self(alice, alice.uri)
        assert not describes_self(alice, 'https://remote.example/users/bob')
