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
import logging
import warnings

from staypuft.exceptions import UnresolvedClassWarning
from staypuft import model
from staypuft.utils import load_yaml

LOG = logging.getLogger('staypuft')


class ClassCatalog(object, metaclass=abc.ABCMeta):
    """Access to the provisioning (Puppet) classes known by the system."""

    @abc.abstractmethod
    def find(self, name):
        """Return the PuppetClass called name, or None."""

    def resolve(self, names):
        """Return the classes matching the names.

        A missing class is not an error, it is logged and skipped.
        """
        classes = []
        for name in names:
            puppetclass = self.find(name)
            if puppetclass is None:
                LOG.warning('no puppet class: %s found' % name)
                warnings.warn('no puppet class: %s found' % name,
                              UnresolvedClassWarning)
                continue
            classes.append(puppetclass)
        return classes

    def add_puppetclasses_from_resource(self, hostgroup, resource):
        """Add the classes of a role or a service to a hostgroup.

        A class already present on the hostgroup is left alone.

        :param resource: any object with a puppetclasses list of names
        :returns: the names of the classes actually added
        """
        added = []
        for puppetclass in self.resolve(resource.puppetclasses):
            if hostgroup.add_puppetclass(puppetclass.name):
                added.append(puppetclass.name)
        if added:
            LOG.debug('%s: added %s' % (hostgroup.title, ', '.join(added)))
        return added


class MemoryClassCatalog(ClassCatalog):
    def __init__(self, classes=None):
        self.classes = {}
        for puppetclass in classes or []:
            self.classes[puppetclass.name] = puppetclass

    def find(self, name):
        return self.classes.get(name)

    def add(self, name, params=None):
        self.classes[name] = model.PuppetClass(name, params)
        return self.classes[name]

    @classmethod
    def from_file(cls, path):
        """Build a catalog from a YAML file: {class_name: [param, ...]}"""
        catalog = cls()
        for name, params in (load_yaml(path) or {}).items():
            catalog.add(name, params)
        return catalog

    def dump(self):
        data = {}
        for name in sorted(self.classes):
            data[name] = [
                {'key': p.key,
                 'key_type': p.key_type,
                 'default_value': p.default_value,
                 'override': p.override}
                for p in self.classes[name].class_params.values()]
        return data

    @classmethod
    def load(cls, data):
        catalog = cls()
        for name, params in (data or {}).items():
            puppetclass = catalog.add(name)
            for entry in params:
                param = model.ClassParam(
                    entry['key'],
                    key_type=entry.get('key_type', 'string'),
                    default_value=entry.get('default_value'),
                    override=entry.get('override', False))
                puppetclass.class_params[param.key] = param
        return catalog
