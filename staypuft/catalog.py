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

from staypuft.exceptions import CatalogError
from staypuft import params as staypuft_params
from staypuft.reconciler import diff_by_key

LOG = logging.getLogger('staypuft')


def _listify(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _listed_twice(key):
    return CatalogError('%s is listed twice' % (key,))


class SeedReport(object):
    """Count the join table changes done by a seed run."""
    def __init__(self):
        self.counts = collections.Counter()

    def add(self, table, action, count=1):
        if count:
            self.counts[(table, action)] += count

    @property
    def mutations(self):
        return sum(self.counts.values())

    def __str__(self):
        if not self.mutations:
            return 'catalog is up to date'
        return ', '.join(
            '%s %s: %d' % (table, action, count)
            for (table, action), count in sorted(self.counts.items()))


class CatalogResolver(object):
    """Load the layouts, services and roles of a catalog definition.

    The definition is the structure of data/catalog.yaml. Layouts and
    services are indexed by a reference only used within the definition.
    Running seed() again reconciles the RoleService and LayoutRole
    associations with the definition: new ones are added, deploy orders
    are updated and the stale ones are removed.

    :param store: a MemoryStore like object
    :param classes: a ClassCatalog
    :param params: the default class parameter values, by default the
    content of data/params.yaml
    """
    def __init__(self, store, classes, params=None):
        self.store = store
        self.classes = classes
        if params is None:
            params = staypuft_params.load_default_params()
        self.params = params

    def resolve_classes(self, names):
        """Resolve class names and set their default parameter values.

        :returns: the names of the classes found in the catalog
        """
        puppetclasses = self.classes.resolve(_listify(names))
        for puppetclass in puppetclasses:
            staypuft_params.apply_default_params(puppetclass, self.params)
        return [puppetclass.name for puppetclass in puppetclasses]

    def seed(self, definition):
        report = SeedReport()
        layouts = {}
        for ref, entry in (definition.get('layouts') or {}).items():
            layouts[ref] = self.store.find_or_create_layout(
                entry['name'], entry['networking'])

        services = {}
        for ref, entry in (definition.get('services') or {}).items():
            service = self.store.find_or_create_service(entry['name'])
            service.puppetclasses = self.resolve_classes(entry.get('class'))
            service.description = entry.get('description')
            services[ref] = service

        for entry in definition.get('roles') or []:
            role = self.store.find_or_create_role(entry['name'])
            role.puppetclasses = self.resolve_classes(entry.get('class'))
            role.description = entry.get('description')
            self._reconcile_services(role, entry.get('services') or [],
                                     services, report)
            self._reconcile_layouts(role, entry.get('layouts') or [],
                                    layouts, report)
        LOG.info('seed: %s' % report)
        return report

    def _reconcile_services(self, role, refs, services, report):
        desired = []
        for ref in refs:
            if ref not in services:
                raise CatalogError('role %s: unknown service %s' % (
                    role.name, ref))
            desired.append((services[ref].name, services[ref]))
        current = dict((service.name, service) for service in role.services)
        _, missing, stale = diff_by_key(current, desired, _listed_twice)
        role.services = [service for _, service in desired]
        report.add('role_services', 'added', len(missing))
        report.add('role_services', 'removed', len(stale))

    def _reconcile_layouts(self, role, refs, layouts, report):
        desired = []
        for ref, deploy_order in refs:
            if ref not in layouts:
                raise CatalogError('role %s: unknown layout %s' % (
                    role.name, ref))
            layout = layouts[ref]
            desired.append((layout.key, (layout, deploy_order)))
        current = dict(
            (layout.key, layout) for layout in self.store.layouts.values()
            if layout.find(role.name))
        matched, missing, stale = diff_by_key(current, desired, _listed_twice)

        for _, layout, (_, deploy_order) in matched:
            layout_role = layout.find(role.name)
            if layout_role.deploy_order != deploy_order:
                layout_role.deploy_order = deploy_order
                report.add('layout_roles', 'updated')
        for _, (layout, deploy_order) in missing:
            layout.add_role(role, deploy_order)
            report.add('layout_roles', 'added')
        for key in stale:
            current[key].remove_role(role.name)
            report.add('layout_roles', 'removed')

    def seed_functional_dependencies(self, definition):
        """Make class parameters default to deployment dependent values.

        :param definition: {class name: {parameter: template}}, a template
        is a Jinja2 expression rendered with the deployment
        """
        for class_name, class_params in (definition or {}).items():
            puppetclass = self.classes.find(class_name)
            if puppetclass is None:
                raise CatalogError('missing puppet class %s' % class_name)
            for key, default_value in class_params.items():
                param = puppetclass.find_param(key)
                if param is None:
                    raise CatalogError('missing param %s in %s' % (
                        key, class_name))
                param.default_value = default_value
                param.key_type = 'string'
