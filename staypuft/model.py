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

from staypuft.exceptions import DuplicateRoleError

BASE_HOSTGROUP_NAME = 'base_hostgroup'


class Service(object):
    """A capability grouping under a role (MySQL, Nova compute...)."""
    def __init__(self, name, puppetclasses=None, description=None):
        self.name = name
        self.puppetclasses = list(puppetclasses or [])
        self.description = description

    def __repr__(self):
        return '<Service %s>' % self.name


class Role(object):
    """A deployable function like a controller or a compute node.

    :param name: the unique name of the role
    :param puppetclasses: the provisioning classes of the role itself
    :param services: the Service objects attached to the role, the
    RoleService join table
    """
    def __init__(self, name, puppetclasses=None, services=None,
                 description=None):
        self.name = name
        self.puppetclasses = list(puppetclasses or [])
        self.services = list(services or [])
        self.description = description

    def all_puppetclasses(self):
        """Classes of the role followed by the classes of its services."""
        names = list(self.puppetclasses)
        for service in self.services:
            names.extend(service.puppetclasses)
        return names

    def __repr__(self):
        return '<Role %s>' % self.name


class LayoutRole(object):
    def __init__(self, role, deploy_order, position=0):
        self.role = role
        self.deploy_order = deploy_order
        self.position = position


class Layout(object):
    """A topology template, identified by its name and its networking mode.

    The roles keep their insertion order, ordered() sorts them by deploy
    order.
    """
    def __init__(self, name, networking):
        self.name = name
        self.networking = networking
        self.layout_roles = []
        self._position = 0

    @property
    def key(self):
        return (self.name, self.networking)

    def find(self, role_name):
        for layout_role in self.layout_roles:
            if layout_role.role.name == role_name:
                return layout_role

    def add_role(self, role, deploy_order):
        if self.find(role.name):
            raise DuplicateRoleError(role.name)
        layout_role = LayoutRole(role, deploy_order, self._position)
        self._position += 1
        self.layout_roles.append(layout_role)
        return layout_role

    def remove_role(self, role_name):
        self.layout_roles = [
            lr for lr in self.layout_roles if lr.role.name != role_name]

    def ordered(self):
        return sorted(self.layout_roles,
                      key=lambda lr: (lr.deploy_order, lr.position))

    def desired(self):
        """The (role, deploy_order) pairs to reconcile a deployment with."""
        return [(lr.role, lr.deploy_order) for lr in self.layout_roles]

    def __repr__(self):
        return '<Layout %s (%s)>' % self.key


class Hostgroup(object):
    """A provisioning namespace.

    The parameters dict holds the group parameters, the puppetclasses list
    never contains the same class twice.
    """
    def __init__(self, name, parent=None, id=None):
        self.id = id
        self.name = name
        self.parent = parent
        self.puppetclasses = []
        self.parameters = {}

    @property
    def title(self):
        if self.parent is None:
            return self.name
        return '%s/%s' % (self.parent.title, self.name)

    def add_puppetclass(self, name):
        if name in self.puppetclasses:
            return False
        self.puppetclasses.append(name)
        return True

    def __repr__(self):
        return '<Hostgroup %s>' % self.title


class DeploymentRoleHostgroup(object):
    """Binds a role to the hostgroup it owns within a deployment."""
    def __init__(self, deployment_name, role, hostgroup, deploy_order):
        self.deployment_name = deployment_name
        self.role = role
        self.hostgroup = hostgroup
        self.deploy_order = deploy_order

    @property
    def services(self):
        return self.role.services

    def __repr__(self):
        return '<DeploymentRoleHostgroup %s/%s order=%d>' % (
            self.deployment_name, self.role.name, self.deploy_order)


class ClassParam(object):
    def __init__(self, key, key_type='string', default_value=None,
                 override=False):
        self.key = key
        self.key_type = key_type
        self.default_value = default_value
        self.override = override


class PuppetClass(object):
    def __init__(self, name, params=None):
        self.name = name
        self.class_params = {}
        for key in params or []:
            self.class_params[key] = ClassParam(key)

    def find_param(self, key):
        return self.class_params.get(key)


class Host(object):
    def __init__(self, name, hostgroup=None, environment=None):
        self.name = name
        self.hostgroup = hostgroup
        self.environment = environment
