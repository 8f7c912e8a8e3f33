from dockerstep.base import BaseCommand, Caching, ImageConfig


class _FakeLayer:
    def __init__(self, tar_content=b""):
        self.tar_content = tar_content


def test_caching_returns_layer():
    layer = _FakeLayer()
    c = Caching(layer=layer)
    assert c.layer() is layer
    assert len(c.layer().tar_content) == len(_FakeLayer().tar_content)


def test_base_command_defaults():
    b = BaseCommand()
    assert b.files_to_snapshot() == []
    assert b.files_used_from_context(ImageConfig(), None) == []
    assert b.metadata_only() is True
    assert b.provides_files_to_snapshot() is True
    assert b.requires_unpacked_fs() is False
    assert b.should_cache_output() is False
    assert b.should_detect_deleted_files() is False
    assert b.is_args_envs_required_in_cache() is False
    assert b.cache_command(object()) is None


def test_image_config_defaults_independent():
    a, b = ImageConfig(), ImageConfig()
    a.env.append("A=1")
    assert b.env == []
    assert a.labels is None