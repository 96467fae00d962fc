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

import logging

from staypuft.exceptions import CatalogError
from staypuft.exceptions import LockedError
from staypuft.exceptions import StaypuftError
from staypuft import host as staypuft_host
from staypuft import params
from staypuft.passwords import Passwords
from staypuft.reconciler import Reconciler
from staypuft.settings import DeploymentSettings

LOG = logging.getLogger('staypuft')


class Deployment(object):
    """A multi-host OpenStack deployment.

    The deployment owns a root hostgroup, created under the base hostgroup
    and named after the deployment. Each role of its layout gets a child
    hostgroup, see update_hostgroup_list().
    """

    # form step states
    STEP_INACTIVE = 'inactive'
    STEP_SETTINGS = 'settings'
    STEP_CONFIGURATION = 'configuration'
    STEP_COMPLETE = 'complete'
    STEP_SELECTION = 'selection'

    AVAILABLE_LOCKS = ('deploy',)

    # what the parameter templates can reach
    jail_allow = ('name', 'amqp_provider', 'networking', 'layout_name',
                  'hypervisor', 'platform', 'passwords')

    def __init__(self, name, store, classes, description=None,
                 passwords=None, form_step=STEP_INACTIVE, hostgroup=None,
                 **settings):
        self.name = name
        self.store = store
        self.classes = classes
        self.description = description
        self.form_step = form_step
        if hostgroup is None:
            hostgroup = store.new_hostgroup(name, store.base_hostgroup)
        self.hostgroup = hostgroup
        self.settings = DeploymentSettings(hostgroup.parameters, **settings)
        self.passwords = passwords or Passwords()
        self.reconciler = Reconciler(store, classes)

    @classmethod
    def find(cls, name, store, classes, passwords=None):
        """Load a saved deployment, None if there is none by this name."""
        record = store.deployments.get(name)
        if record is None:
            return None
        return cls(name, store, classes,
                   description=record['description'],
                   form_step=record['form_step'] or cls.STEP_INACTIVE,
                   hostgroup=record['hostgroup'],
                   passwords=passwords)

    @property
    def amqp_provider(self):
        return self.settings.get('amqp_provider')

    @property
    def networking(self):
        return self.settings.get('networking')

    @property
    def layout_name(self):
        return self.settings.get('layout_name')

    @property
    def hypervisor(self):
        return self.settings.get('hypervisor')

    @property
    def platform(self):
        return self.settings.get('platform')

    @property
    def layout(self):
        return self.store.find_layout(self.layout_name, self.networking)

    @property
    def role_hostgroups(self):
        """The DeploymentRoleHostgroup, sorted by deploy order."""
        return self.store.role_hostgroups(self.name)

    @property
    def roles_ordered(self):
        return [b.role for b in self.role_hostgroups]

    @property
    def child_hostgroups(self):
        return [b.hostgroup for b in self.role_hostgroups]

    @property
    def services(self):
        services = []
        for role in self.roles_ordered:
            services.extend(role.services)
        return services

    def validate(self):
        if not self.name:
            raise StaypuftError('a deployment needs a name')
        self.settings.validate()
        if self.layout is None:
            raise CatalogError('no layout %s with %s networking' % (
                self.layout_name, self.networking))

    def check_form_complete(self):
        """The configuration step is the last one of the form."""
        if self.form_step == self.STEP_CONFIGURATION:
            self.form_step = self.STEP_COMPLETE

    def form_complete(self):
        return self.form_step == self.STEP_COMPLETE

    def save(self):
        self.check_form_complete()
        self.validate()
        self.settings.save()
        self.hostgroup.name = self.name
        self.store.save_deployment(self.name, self.hostgroup,
                                   self.description, self.form_step)

    def rename(self, new_name):
        if new_name != self.name and new_name in self.store.deployments:
            raise StaypuftError('deployment %s already exists' % new_name)
        if self.name in self.store.deployments:
            self.store.rename_deployment(self.name, new_name)
        self.name = new_name
        self.hostgroup.name = new_name

    def update_hostgroup_list(self):
        """Align the role hostgroups with the current layout.

        A hostgroup is added for each role not represented yet, the deploy
        orders are refreshed and the hostgroups of the roles that left the
        layout are destroyed. The hosts of the kept roles stay where they
        are.

        :returns: the ReconcileResult
        """
        self.validate()
        with self.lock('deploy'):
            result = self.reconciler.converge(self.name, self.hostgroup,
                                              self.layout.desired())
        LOG.info('%s: %r' % (self.name, result))
        return result

    def services_hostgroup_map(self):
        """Map each service name to the hostgroup that carries it."""
        mapping = {}
        for binding in self.role_hostgroups:
            for service in binding.services:
                mapping[service.name] = binding.hostgroup
        return mapping

    def hosts(self, hosts):
        return staypuft_host.in_deployment(hosts, self)

    def lock(self, name):
        """Hold one of the AVAILABLE_LOCKS of the deployment."""
        if name not in self.AVAILABLE_LOCKS:
            raise ValueError('unknown lock: %s' % name)
        return self.store.lock(self.name, name)

    def in_progress(self):
        return self.store.is_locked(self.name, 'deploy')

    def deployed(self, hosts):
        return any(staypuft_host.open_stack_deployed(h, self)
                   for h in self.hosts(hosts))

    def render_parameters(self):
        """Render the class parameters of every role hostgroup.

        :returns: {role name: {class name: {key: value}}}
        """
        jail = params.DeploymentJail()
        rendered = {}
        for binding in self.role_hostgroups:
            rendered[binding.role.name] = params.render_hostgroup_parameters(
                self, binding.hostgroup, self.classes, jail)
        return rendered

    def destroy(self):
        """Destroy the role hostgroups, then the root hostgroup."""
        if self.in_progress():
            raise LockedError('%s is being deployed' % self.name)
        with self.store.transaction():
            for binding in self.role_hostgroups:
                self.store.destroy_role_hostgroup(binding)
            self.store.destroy_hostgroup(self.hostgroup)
        self.store.delete_deployment(self.name)
        LOG.info('deployment %s destroyed' % self.name)
