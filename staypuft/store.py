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

import abc
import contextlib
import logging
import threading

from staypuft.exceptions import DuplicateRoleError
from staypuft.exceptions import LockedError
from staypuft.exceptions import StaypuftError
from staypuft import model

LOG = logging.getLogger('staypuft')

DEPLOY_ORDER_PARAM = 'staypuft::deploy_order'


class Store(object, metaclass=abc.ABCMeta):
    """What the reconciler needs from the persistence layer."""

    def transaction(self):
        return contextlib.nullcontext()

    @abc.abstractmethod
    def role_hostgroups(self, deployment_name):
        """Return the DeploymentRoleHostgroup of a deployment."""

    @abc.abstractmethod
    def create_role_hostgroup(self, deployment_name, parent, role,
                              deploy_order):
        """Create a hostgroup named after the role and bind it.

        Either both the hostgroup and the binding exist afterwards, or
        none of them.
        """

    @abc.abstractmethod
    def update_deploy_order(self, binding, deploy_order):
        pass

    @abc.abstractmethod
    def destroy_role_hostgroup(self, binding):
        """Destroy the hostgroup owned by the binding, then the binding."""


class MemoryStore(Store):
    """An in-memory Store.

    Every mutation done within transaction() is journaled, if the block
    raises, the journal is replayed backward and the error propagates. Each
    thread has its own journal.
    """
    def __init__(self):
        self.base_hostgroup = model.Hostgroup(model.BASE_HOSTGROUP_NAME, id=1)
        self.hostgroups = {1: self.base_hostgroup}
        self._next_id = 2
        self.services = {}
        self.roles = {}
        self.layouts = {}
        self.deployments = {}
        self._bindings = {}
        self._local = threading.local()
        self._ids_guard = threading.Lock()
        self._locks = {}
        self._locks_guard = threading.Lock()

    @contextlib.contextmanager
    def transaction(self):
        if self._journal() is not None:
            # nested blocks belong to the outer transaction
            yield
            return
        journal = self._local.journal = []
        try:
            yield
        except Exception:
            LOG.debug('rolling back %d change(s)' % len(journal))
            for undo in reversed(journal):
                undo()
            raise
        finally:
            self._local.journal = None

    def _journal(self):
        return getattr(self._local, 'journal', None)

    def _record(self, undo):
        journal = self._journal()
        if journal is not None:
            journal.append(undo)

    @contextlib.contextmanager
    def lock(self, deployment_name, name='deploy'):
        """Hold the named lock of a deployment.

        The lock is not reentrant and never waits, LockedError is raised if
        it is already held.
        """
        with self._locks_guard:
            lock = self._locks.setdefault((deployment_name, name),
                                          threading.Lock())
        if not lock.acquire(False):
            raise LockedError('%s is locked (%s)' % (deployment_name, name))
        try:
            yield
        finally:
            lock.release()

    def is_locked(self, deployment_name, name='deploy'):
        lock = self._locks.get((deployment_name, name))
        return lock is not None and lock.locked()

    # hostgroups

    def new_hostgroup(self, name, parent=None):
        with self._ids_guard:
            hostgroup_id = self._next_id
            self._next_id += 1
        hostgroup = model.Hostgroup(name, parent or self.base_hostgroup,
                                    id=hostgroup_id)
        self.hostgroups[hostgroup.id] = hostgroup
        self._record(lambda: self.hostgroups.pop(hostgroup.id, None))
        LOG.debug('hostgroup %s created' % hostgroup.title)
        return hostgroup

    def destroy_hostgroup(self, hostgroup):
        self.hostgroups.pop(hostgroup.id)
        self._record(lambda: self.hostgroups.__setitem__(hostgroup.id,
                                                          hostgroup))
        LOG.debug('hostgroup %s destroyed' % hostgroup.title)

    def set_parameter(self, hostgroup, key, value):
        parameters = hostgroup.parameters
        if key in parameters:
            old = parameters[key]
            self._record(lambda: parameters.__setitem__(key, old))
        else:
            self._record(lambda: parameters.pop(key, None))
        parameters[key] = value

    # deployment role hostgroups

    def role_hostgroups(self, deployment_name):
        bindings = self._bindings.get(deployment_name, {}).values()
        return sorted(bindings, key=lambda b: (b.deploy_order, b.role.name))

    def create_role_hostgroup(self, deployment_name, parent, role,
                              deploy_order):
        with self.transaction():
            bindings = self._bindings.setdefault(deployment_name, {})
            if role.name in bindings:
                raise DuplicateRoleError(role.name)
            hostgroup = self.new_hostgroup(role.name, parent)
            self.set_parameter(hostgroup, DEPLOY_ORDER_PARAM, deploy_order)
            binding = model.DeploymentRoleHostgroup(
                deployment_name, role, hostgroup, deploy_order)
            bindings[role.name] = binding
            self._record(lambda: bindings.pop(role.name, None))
        return binding

    def update_deploy_order(self, binding, deploy_order):
        with self.transaction():
            old = binding.deploy_order
            self._record(lambda: setattr(binding, 'deploy_order', old))
            binding.deploy_order = deploy_order
            self.set_parameter(binding.hostgroup, DEPLOY_ORDER_PARAM,
                               deploy_order)

    def destroy_role_hostgroup(self, binding):
        with self.transaction():
            self.destroy_hostgroup(binding.hostgroup)
            bindings = self._bindings[binding.deployment_name]
            del bindings[binding.role.name]
            self._record(lambda: bindings.__setitem__(binding.role.name,
                                                      binding))

    # catalog

    def find_or_create_service(self, name):
        if name not in self.services:
            self.services[name] = model.Service(name)
            LOG.debug('service %s created' % name)
        return self.services[name]

    def find_or_create_role(self, name):
        if name not in self.roles:
            self.roles[name] = model.Role(name)
            LOG.debug('role %s created' % name)
        return self.roles[name]

    def find_layout(self, name, networking):
        return self.layouts.get((name, networking))

    def find_or_create_layout(self, name, networking):
        key = (name, networking)
        if key not in self.layouts:
            self.layouts[key] = model.Layout(name, networking)
            LOG.debug('layout %s (%s) created' % key)
        return self.layouts[key]

    # deployments

    def save_deployment(self, name, hostgroup, description=None,
                        form_step=None):
        self.deployments[name] = {
            'hostgroup': hostgroup,
            'description': description,
            'form_step': form_step}

    def rename_deployment(self, old_name, new_name):
        if new_name == old_name:
            return
        if new_name in self.deployments or self._bindings.get(new_name):
            raise StaypuftError('deployment %s already exists' % new_name)
        self.deployments[new_name] = self.deployments.pop(old_name)
        bindings = self._bindings.pop(old_name, {})
        for binding in bindings.values():
            binding.deployment_name = new_name
        self._bindings[new_name] = bindings
        with self._locks_guard:
            for key in [k for k in self._locks if k[0] == old_name]:
                self._locks[(new_name, key[1])] = self._locks.pop(key)

    def delete_deployment(self, name):
        self.deployments.pop(name, None)
        self._bindings.pop(name, None)
        with self._locks_guard:
            for key in [k for k in self._locks if k[0] == name]:
                del self._locks[key]

    def dump(self):
        """Serialize the store in a structure that yaml.safe_dump accepts."""
        hostgroups = []
        for hostgroup_id in sorted(self.hostgroups):
            hostgroup = self.hostgroups[hostgroup_id]
            hostgroups.append({
                'id': hostgroup.id,
                'name': hostgroup.name,
                'parent': hostgroup.parent.id if hostgroup.parent else None,
                'puppetclasses': list(hostgroup.puppetclasses),
                'parameters': dict(hostgroup.parameters)})
        deployments = []
        for name in sorted(self.deployments):
            record = self.deployments[name]
            deployments.append({
                'name': name,
                'description': record['description'],
                'form_step': record['form_step'],
                'hostgroup': record['hostgroup'].id,
                'roles': [[b.role.name, b.hostgroup.id, b.deploy_order]
                          for b in self.role_hostgroups(name)]})
        return {
            'hostgroups': hostgroups,
            'services': [
                {'name': s.name,
                 'puppetclasses': list(s.puppetclasses),
                 'description': s.description}
                for s in sorted(self.services.values(), key=lambda s: s.name)],
            'roles': [
                {'name': r.name,
                 'puppetclasses': list(r.puppetclasses),
                 'services': [s.name for s in r.services],
                 'description': r.description}
                for r in sorted(self.roles.values(), key=lambda r: r.name)],
            'layouts': [
                {'name': layout.name,
                 'networking': layout.networking,
                 'roles': [[lr.role.name, lr.deploy_order]
                           for lr in layout.layout_roles]}
                for layout in sorted(self.layouts.values(),
                                     key=lambda layout: layout.key)],
            'deployments': deployments}

    @classmethod
    def load(cls, data):
        store = cls()
        if not data:
            return store
        for entry in data.get('hostgroups', []):
            if entry['id'] == 1:
                hostgroup = store.base_hostgroup
            else:
                hostgroup = model.Hostgroup(
                    entry['name'], store.hostgroups[entry['parent']],
                    id=entry['id'])
                store.hostgroups[hostgroup.id] = hostgroup
            hostgroup.puppetclasses = list(entry.get('puppetclasses', []))
            hostgroup.parameters = dict(entry.get('parameters', {}))
            store._next_id = max(store._next_id, hostgroup.id + 1)
        for entry in data.get('services', []):
            service = store.find_or_create_service(entry['name'])
            service.puppetclasses = list(entry.get('puppetclasses', []))
            service.description = entry.get('description')
        for entry in data.get('roles', []):
            role = store.find_or_create_role(entry['name'])
            role.puppetclasses = list(entry.get('puppetclasses', []))
            role.services = [store.services[name]
                             for name in entry.get('services', [])]
            role.description = entry.get('description')
        for entry in data.get('layouts', []):
            layout = store.find_or_create_layout(entry['name'],
                                                 entry['networking'])
            for role_name, deploy_order in entry.get('roles', []):
                layout.add_role(store.roles[role_name], deploy_order)
        for entry in data.get('deployments', []):
            store.save_deployment(entry['name'],
                                  store.hostgroups[entry['hostgroup']],
                                  entry.get('description'),
                                  entry.get('form_step'))
            bindings = store._bindings.setdefault(entry['name'], {})
            for role_name, hostgroup_id, deploy_order in entry.get('roles', []):
                bindings[role_name] = model.DeploymentRoleHostgroup(
                    entry['name'], store.roles[role_name],
                    store.hostgroups[hostgroup_id], deploy_order)
        return store
