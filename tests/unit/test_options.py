import pytest
from spannerdb.options import SpannerOptions, iterrow_data_loader


def test_init_defaults():
    """Test default initialization"""
    options = SpannerOptions(
        project='test-project',
        instance='test-instance',
        database='test-db',
    )

    assert options.drivername == 'spanner'
    assert options.appname is not None
    assert options.credentials is None
    assert options.timeout == 0
    assert options.check_connection is True
    assert options.serialize_queries is True
    assert options.data_loader == iterrow_data_loader


def test_database_path():
    options = SpannerOptions(project='p', instance='i', database='d')
    assert options.database_path == 'projects/p/instances/i/databases/d'


def test_from_dsn():
    """Test building options from a database path"""
    options = SpannerOptions.from_dsn('projects/p1/instances/i1/databases/d1', timeout=5)

    assert options.project == 'p1'
    assert options.instance == 'i1'
    assert options.database == 'd1'
    assert options.timeout == 5
    assert options.database_path == 'projects/p1/instances/i1/databases/d1'


def test_from_dsn_keyword_overrides():
    """Keywords override fields parsed from the path"""
    options = SpannerOptions.from_dsn('projects/p1/instances/i1/databases/d1',
                                      project='p2', database='d2')

    assert options.database_path == 'projects/p2/instances/i1/databases/d2'


@pytest.mark.parametrize('dsn', [
    '',
    'projects/p/instances/i',
    'projects/p/instances/i/databases/',
    'projects//instances/i/databases/d',
    'spanner://p/i/d',
    'projects/p/instances/i/databases/d/extra',
    None,
])
def test_from_dsn_malformed(dsn):
    with pytest.raises(ValueError):
        SpannerOptions.from_dsn(dsn)


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        SpannerOptions(drivername='postgresql', project='p', instance='i', database='d')

    with pytest.raises(ValueError):
        SpannerOptions(project='p', instance='i')

    with pytest.raises(ValueError):
        SpannerOptions(project='', instance='i', database='d')

    with pytest.raises(ValueError):
        SpannerOptions(project='p', instance='i', database='d', timeout=-1)


def test_from_config_setting():
    """Options load from a libb Setting profile"""
    import config

    from libb import load_options

    @load_options(cls=SpannerOptions)
    def build(options, config=None, **kw):
        return options

    options = build('spanner', config=config)
    assert isinstance(options, SpannerOptions)
    assert options.database_path == 'projects/test-project/instances/test-instance/databases/test-db'
    assert options.timeout == 30


if __name__ == '__main__':
    __import__('pytest').main([__file__])
