import pytest

from staypuft.catalog import CatalogResolver
from staypuft.deployment import Deployment
from staypuft.passwords import Passwords
from staypuft.puppet import MemoryClassCatalog
from staypuft import settings
from staypuft.store import MemoryStore
from staypuft.utils import load_yaml


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def small_classes():
    catalog = MemoryClassCatalog()
    catalog.add('role::a', ['x'])
    catalog.add('role::b')
    catalog.add('service::db', ['password'])
    return catalog


@pytest.fixture
def roles(store):
    db = store.find_or_create_service('db')
    db.puppetclasses = ['service::db']
    a = store.find_or_create_role('A')
    a.puppetclasses = ['role::a']
    a.services = [db]
    b = store.find_or_create_role('B')
    b.puppetclasses = ['role::b']
    c = store.find_or_create_role('C')
    return {'A': a, 'B': b, 'C': c}


@pytest.fixture
def classes():
    return MemoryClassCatalog.from_file('puppetclasses.yaml')


@pytest.fixture
def seeded_store(store, classes):
    resolver = CatalogResolver(store, classes)
    resolver.seed(load_yaml('catalog.yaml'))
    resolver.seed_functional_dependencies(
        load_yaml('functional_dependencies.yaml'))
    return store


@pytest.fixture
def passwords():
    return Passwords(mode='single', single_password='secrete')


@pytest.fixture
def deployment(seeded_store, classes, passwords):
    d = Deployment('dep', seeded_store, classes, passwords=passwords,
                   networking=settings.Networking.NEUTRON,
                   layout_name=settings.LayoutName.HA)
    d.save()
    return d
