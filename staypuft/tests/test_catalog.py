# -*- coding: utf-8 -*-
#
# Copyright (C) 2016 Red Hat, Inc
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import copy

import pytest

from staypuft.catalog import CatalogResolver
from staypuft.catalog import SeedReport
from staypuft.exceptions import CatalogError
from staypuft.exceptions import UnresolvedClassWarning
from staypuft.utils import load_yaml


definition = {
    'layouts': {
        'l': {'name': 'L', 'networking': 'nova'},
        'm': {'name': 'M', 'networking': 'nova'}},
    'services': {
        'db': {'name': 'DB', 'class': 'service::db'}},
    'roles': [
        {'name': 'R', 'class': ['role::a'], 'layouts': [['l', 1], ['m', 2]],
         'services': ['db']}]}


@pytest.fixture
def resolver(store, small_classes):
    return CatalogResolver(store, small_classes, params={'x': 'true'})


def test_seed(store, resolver, small_classes):
    report = resolver.seed(definition)
    assert report.counts == {('layout_roles', 'added'): 2,
                             ('role_services', 'added'): 1}
    role = store.roles['R']
    assert role.puppetclasses == ['role::a']
    assert [s.name for s in role.services] == ['DB']
    assert store.services['DB'].puppetclasses == ['service::db']
    assert store.find_layout('M', 'nova').find('R').deploy_order == 2

    param = small_classes.find('role::a').find_param('x')
    assert param.default_value == 'true'
    assert param.key_type == 'string'
    assert param.override
    # without a default, the parameter is still overridable
    assert small_classes.find('service::db').find_param('password').override


def test_seed_again(resolver):
    resolver.seed(definition)
    report = resolver.seed(definition)
    assert report.mutations == 0
    assert str(report) == 'catalog is up to date'


def test_seed_changes(store, resolver):
    resolver.seed(definition)
    changed = copy.deepcopy(definition)
    changed['roles'][0]['layouts'] = [['l', 4]]
    changed['roles'][0]['services'] = []
    report = resolver.seed(changed)
    assert report.counts == {('layout_roles', 'updated'): 1,
                             ('layout_roles', 'removed'): 1,
                             ('role_services', 'removed'): 1}
    assert store.find_layout('L', 'nova').find('R').deploy_order == 4
    assert store.find_layout('M', 'nova').layout_roles == []
    assert store.roles['R'].services == []


def test_seed_unknown_service(resolver):
    broken = copy.deepcopy(definition)
    broken['roles'][0]['services'] = ['nope']
    with pytest.raises(CatalogError):
        resolver.seed(broken)


def test_seed_unknown_layout(resolver):
    broken = copy.deepcopy(definition)
    broken['roles'][0]['layouts'] = [['nope', 1]]
    with pytest.raises(CatalogError):
        resolver.seed(broken)


def test_seed_service_listed_twice(resolver):
    broken = copy.deepcopy(definition)
    broken['roles'][0]['services'] = ['db', 'db']
    with pytest.raises(CatalogError):
        resolver.seed(broken)


def test_seed_missing_class(store, resolver):
    broken = copy.deepcopy(definition)
    broken['roles'][0]['class'] = 'missing::class'
    with pytest.warns(UnresolvedClassWarning):
        resolver.seed(broken)
    assert store.roles['R'].puppetclasses == []


def test_seed_report():
    report = SeedReport()
    report.add('role_services', 'added', 0)
    assert report.mutations == 0
    report.add('role_services', 'added', 2)
    report.add('layout_roles', 'removed')
    assert report.mutations == 3
    assert str(report) == 'layout_roles removed: 1, role_services added: 2'


def test_seed_default_catalog(seeded_store, classes):
    assert len(seeded_store.layouts) == 4
    assert len(seeded_store.services) == 27
    assert len(seeded_store.roles) == 8
    layout = seeded_store.find_layout('Controller / Compute', 'neutron')
    assert [lr.role.name for lr in layout.ordered()] == [
        'Controller (Neutron)', 'Cinder Block Storage', 'Neutron Networker',
        'Swift Storage Node', 'Compute (Neutron)']
    ha = seeded_store.roles['HA Controller']
    assert len(ha.services) == 13
    assert 'quickstack::pacemaker::params' in ha.all_puppetclasses()

    mysql = classes.find('quickstack::pacemaker::mysql')
    assert mysql.find_param('mysql_virtual_ip').default_value == (
        '192.168.200.220')
    swift = classes.find('quickstack::swift::storage')
    assert swift.find_param('swift_loopback').key_type == 'boolean'


def test_seed_default_catalog_report(store, classes):
    resolver = CatalogResolver(store, classes)
    report = resolver.seed(load_yaml('catalog.yaml'))
    assert report.counts[('role_services', 'added')] == 34
    assert report.counts[('layout_roles', 'added')] == 17
    assert resolver.seed(load_yaml('catalog.yaml')).mutations == 0


def test_seed_functional_dependencies(seeded_store, classes):
    param = classes.find('quickstack::neutron::controller').find_param(
        'amqp_server')
    assert param.default_value == '{{ deployment.amqp_provider }}'
    assert param.key_type == 'string'
    email = classes.find('quickstack::pacemaker::keystone').find_param(
        'admin_email')
    assert email.default_value.startswith('admin@')


def test_seed_functional_dependencies_errors(resolver):
    with pytest.raises(CatalogError):
        resolver.seed_functional_dependencies({'nope::class': {}})
    with pytest.raises(CatalogError):
        resolver.seed_functional_dependencies(
            {'role::a': {'missing': '{{ deployment.name }}'}})
