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

import collections
import logging

from staypuft.exceptions import DuplicateRoleError

LOG = logging.getLogger('staypuft')

Binding = collections.namedtuple('Binding', 'role hostgroup deploy_order')
Creation = collections.namedtuple('Creation', 'role deploy_order')
Update = collections.namedtuple('Update', 'binding old_order deploy_order')


def diff_by_key(current, desired, error=DuplicateRoleError):
    """Compare the current items with the desired ones, key by key.

    :param current: a dict key -> current item
    :param desired: an ordered iterable of (key, value)
    :param error: the exception class raised with the key when a key is
    desired twice
    :returns: a tuple (matched, missing, stale). matched lists the
    (key, current item, value) and missing the (key, value) in the desired
    order. stale is the sorted list of the current keys nobody desires.
    """
    seen = set()
    matched = []
    missing = []
    for key, value in desired:
        if key in seen:
            raise error(key)
        seen.add(key)
        if key in current:
            matched.append((key, current[key], value))
        else:
            missing.append((key, value))
    stale = sorted(key for key in current if key not in seen)
    return matched, missing, stale


class ReconcileResult(object):
    """The operations that align a deployment with a layout.

    plan holds a (role, deploy_order, binding) entry per desired role, in
    the layout order; binding is None for the roles to create.
    """
    def __init__(self):
        self.keep = []
        self.create = []
        self.update = []
        self.delete = []
        self.plan = []

    @property
    def changed(self):
        return bool(self.create or self.update or self.delete)

    def __repr__(self):
        return '<ReconcileResult keep=%d create=%d update=%d delete=%d>' % (
            len(self.keep), len(self.create), len(self.update),
            len(self.delete))


def reconcile(current, desired):
    """Compute how to go from the current role bindings to a layout.

    This function has no side effect.

    :param current: the bindings of the deployment, any objects with role,
    hostgroup and deploy_order attributes
    :param desired: the ordered (role, deploy_order) pairs of the layout
    :returns: a ReconcileResult
    """
    current_by_role = {}
    for binding in current:
        if binding.role.name in current_by_role:
            raise DuplicateRoleError(binding.role.name)
        current_by_role[binding.role.name] = binding

    desired = list(desired)
    matched, missing, stale = diff_by_key(
        current_by_role,
        [(role.name, (role, deploy_order)) for role, deploy_order in desired])
    missing = dict(missing)
    matched = dict((key, (binding, value)) for key, binding, value in matched)

    result = ReconcileResult()
    for role, deploy_order in desired:
        if role.name in missing:
            result.create.append(Creation(role, deploy_order))
            result.plan.append((role, deploy_order, None))
            continue
        binding, _ = matched[role.name]
        result.keep.append(binding)
        if binding.deploy_order != deploy_order:
            result.update.append(
                Update(binding, binding.deploy_order, deploy_order))
        result.plan.append((role, deploy_order, binding))
    result.delete = sorted(
        (current_by_role[name] for name in stale),
        key=lambda b: (b.deploy_order, b.role.name))
    return result


class Reconciler(object):
    """Apply layouts on deployments through the store and class catalog.

    The caller is expected to hold the deploy lock of the deployment.
    """
    def __init__(self, store, classes):
        self.store = store
        self.classes = classes

    def reconcile(self, deployment_name, desired):
        return reconcile(self.store.role_hostgroups(deployment_name), desired)

    def apply(self, result, deployment_name, parent):
        """Run the operations of a ReconcileResult.

        The roles are created or updated in the layout order, the stale
        bindings are destroyed last. Each role is handled in its own store
        transaction.

        :param parent: the root hostgroup of the deployment
        :returns: the bindings of the deployment, in the layout order
        """
        updates = dict((u.binding.role.name, u.deploy_order)
                       for u in result.update)
        bindings = []
        for role, deploy_order, binding in result.plan:
            with self.store.transaction():
                if binding is None:
                    binding = self.store.create_role_hostgroup(
                        deployment_name, parent, role, deploy_order)
                    LOG.info('%s: role %s added with deploy order %d' % (
                        deployment_name, role.name, deploy_order))
                elif role.name in updates:
                    LOG.info('%s: role %s deploy order %d -> %d' % (
                        deployment_name, role.name, binding.deploy_order,
                        deploy_order))
                    self.store.update_deploy_order(binding, deploy_order)
                self.classes.add_puppetclasses_from_resource(
                    binding.hostgroup, role)
                for service in role.services:
                    self.classes.add_puppetclasses_from_resource(
                        binding.hostgroup, service)
            bindings.append(binding)

        for binding in result.delete:
            LOG.info('%s: role %s removed' % (deployment_name,
                                              binding.role.name))
            self.store.destroy_role_hostgroup(binding)
        return bindings

    def converge(self, deployment_name, parent, desired):
        """reconcile() then apply(), returns the ReconcileResult."""
        result = self.reconcile(deployment_name, desired)
        self.apply(result, deployment_name, parent)
        return result
