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

import threading

import pytest
import yaml

from staypuft.exceptions import DuplicateRoleError
from staypuft.exceptions import LockedError
from staypuft.exceptions import StaypuftError
from staypuft.store import MemoryStore


def test_new_hostgroup(store):
    hostgroup = store.new_hostgroup('dep')
    assert hostgroup.parent is store.base_hostgroup
    assert hostgroup.title == 'base_hostgroup/dep'
    assert store.hostgroups[hostgroup.id] is hostgroup


def test_transaction_rollback(store):
    hostgroup = store.new_hostgroup('dep')
    store.set_parameter(hostgroup, 'key', 'old')
    with pytest.raises(RuntimeError):
        with store.transaction():
            child = store.new_hostgroup('child', hostgroup)
            store.set_parameter(hostgroup, 'key', 'new')
            store.set_parameter(hostgroup, 'other', 1)
            store.destroy_hostgroup(hostgroup)
            raise RuntimeError('boom')
    assert child.id not in store.hostgroups
    assert store.hostgroups[hostgroup.id] is hostgroup
    assert hostgroup.parameters == {'key': 'old'}


def test_transaction_commit(store):
    with store.transaction():
        hostgroup = store.new_hostgroup('dep')
    assert store.hostgroups[hostgroup.id] is hostgroup


def test_nested_transaction_joins_the_outer_one(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                hostgroup = store.new_hostgroup('dep')
            raise RuntimeError('boom')
    assert hostgroup.id not in store.hostgroups


def test_lock(store):
    with store.lock('dep'):
        assert store.is_locked('dep')
        assert not store.is_locked('other')
        with pytest.raises(LockedError):
            with store.lock('dep'):
                pass
        with store.lock('other'):
            pass
    assert not store.is_locked('dep')


def test_create_role_hostgroup(store, roles):
    parent = store.new_hostgroup('dep')
    binding = store.create_role_hostgroup('dep', parent, roles['A'], 3)
    assert binding.hostgroup.name == 'A'
    assert binding.hostgroup.parent is parent
    assert binding.hostgroup.parameters == {'staypuft::deploy_order': 3}
    assert store.role_hostgroups('dep') == [binding]

    count = len(store.hostgroups)
    with pytest.raises(DuplicateRoleError):
        store.create_role_hostgroup('dep', parent, roles['A'], 1)
    assert len(store.hostgroups) == count


def test_destroy_role_hostgroup(store, roles):
    parent = store.new_hostgroup('dep')
    binding = store.create_role_hostgroup('dep', parent, roles['A'], 3)
    store.destroy_role_hostgroup(binding)
    assert store.role_hostgroups('dep') == []
    assert binding.hostgroup.id not in store.hostgroups


def test_role_hostgroups_order(store, roles):
    parent = store.new_hostgroup('dep')
    store.create_role_hostgroup('dep', parent, roles['C'], 2)
    store.create_role_hostgroup('dep', parent, roles['B'], 2)
    store.create_role_hostgroup('dep', parent, roles['A'], 4)
    assert [b.role.name for b in store.role_hostgroups('dep')] == [
        'B', 'C', 'A']


def test_find_or_create(store):
    layout = store.find_or_create_layout('L', 'nova')
    assert store.find_or_create_layout('L', 'nova') is layout
    assert store.find_layout('L', 'neutron') is None
    role = store.find_or_create_role('R')
    assert store.find_or_create_role('R') is role


def test_rename_deployment(store, roles):
    parent = store.new_hostgroup('dep')
    store.save_deployment('dep', parent)
    binding = store.create_role_hostgroup('dep', parent, roles['A'], 1)
    store.rename_deployment('dep', 'prod')
    assert 'dep' not in store.deployments
    assert store.role_hostgroups('prod') == [binding]
    assert binding.deployment_name == 'prod'


def test_transactions_are_per_thread(store, roles):
    one = store.new_hostgroup('one')
    two = store.new_hostgroup('two')
    opened = threading.Event()
    release = threading.Event()
    created = []

    def hold_transaction():
        with store.transaction():
            created.append(
                store.create_role_hostgroup('one', one, roles['A'], 1))
            opened.set()
            release.wait(5)

    thread = threading.Thread(target=hold_transaction)
    thread.start()
    try:
        assert opened.wait(5)
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.create_role_hostgroup('two', two, roles['A'], 1)
                raise RuntimeError('boom')
    finally:
        release.set()
        thread.join(5)

    assert store.role_hostgroups('two') == []
    assert store.role_hostgroups('one') == created
    assert sorted(store.hostgroups) == [
        1, one.id, two.id, created[0].hostgroup.id]


def test_rename_deployment_to_existing_name(store, roles):
    dep = store.new_hostgroup('dep')
    prod = store.new_hostgroup('prod')
    store.save_deployment('dep', dep)
    store.save_deployment('prod', prod)
    binding = store.create_role_hostgroup('dep', dep, roles['A'], 1)
    with pytest.raises(StaypuftError):
        store.rename_deployment('dep', 'prod')
    assert store.deployments['dep']['hostgroup'] is dep
    assert store.deployments['prod']['hostgroup'] is prod
    assert store.role_hostgroups('dep') == [binding]
    assert binding.deployment_name == 'dep'


def test_delete_deployment_drops_its_locks(store):
    store.save_deployment('dep', store.new_hostgroup('dep'))
    with store.lock('dep'):
        pass
    with store.lock('other'):
        pass
    store.delete_deployment('dep')
    assert list(store._locks) == [('other', 'deploy')]
    assert not store.is_locked('dep')


def test_dump_load(deployment, seeded_store):
    deployment.update_hostgroup_list()
    data = seeded_store.dump()
    # the dump is written with yaml.safe_dump
    data = yaml.safe_load(yaml.safe_dump(data))
    store = MemoryStore.load(data)
    assert store.dump() == seeded_store.dump()
    assert [b.hostgroup.title for b in store.role_hostgroups('dep')] == [
        b.hostgroup.title for b in seeded_store.role_hostgroups('dep')]
    hostgroup = store.new_hostgroup('next')
    assert hostgroup.id == max(seeded_store.hostgroups) + 1


def test_load_nothing():
    store = MemoryStore.load(None)
    assert list(store.hostgroups) == [1]
