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

from staypuft.exceptions import InvalidSettingError

PARAM_PREFIX = 'ui::deployment::'


class AmqpProvider(object):
    RABBITMQ = 'rabbitmq'
    QPID = 'qpid'
    LABELS = {RABBITMQ: 'RabbitMQ', QPID: 'Qpid'}
    TYPES = (RABBITMQ, QPID)
    HUMAN = 'Messaging provider'


class Networking(object):
    NOVA = 'nova'
    NEUTRON = 'neutron'
    LABELS = {NOVA: 'Nova Network', NEUTRON: 'Neutron Networking'}
    TYPES = (NOVA, NEUTRON)
    HUMAN = 'Networking'


class LayoutName(object):
    NON_HA = 'Controller / Compute'
    HA = 'High Availability Controllers / Compute'
    LABELS = {NON_HA: 'Controller / Compute',
              HA: 'High Availability Controllers / Compute'}
    TYPES = (NON_HA, HA)
    HUMAN = 'High Availability'


class Hypervisor(object):
    KVM = 'kvm'
    QEMU = 'qemu'
    LABELS = {KVM: 'Libvirt/KVM', QEMU: 'Libvirt/QEMU'}
    TYPES = (KVM, QEMU)
    HUMAN = 'Hypervisor'


class Platform(object):
    RHEL7 = 'rhel7'
    RHEL6 = 'rhel6'
    LABELS = {RHEL7: 'Red Hat Enterprise Linux OpenStack Platform 5 with RHEL 7',
              RHEL6: 'Red Hat Enterprise Linux OpenStack Platform 5 with RHEL 6'}
    TYPES = (RHEL7, RHEL6)
    HUMAN = 'Platform'


class DeploymentSettings(object):
    """The configuration of a deployment.

    The values are kept in a key-value store, usually the parameters of the
    deployment root hostgroup, under the ui::deployment:: prefix. set() only
    changes the local copy, save() validates and writes it back.

    :param parameters: the key-value store, a dict
    """
    CHOICES = {
        'amqp_provider': AmqpProvider,
        'networking': Networking,
        'layout_name': LayoutName,
        'hypervisor': Hypervisor,
        'platform': Platform}
    DEFAULTS = {
        'amqp_provider': AmqpProvider.RABBITMQ,
        'layout_name': LayoutName.NON_HA,
        'hypervisor': Hypervisor.KVM,
        'networking': Networking.NOVA,
        'platform': Platform.RHEL7}
    FIELDS = ('amqp_provider', 'networking', 'layout_name', 'hypervisor',
              'platform')

    def __init__(self, parameters, **values):
        self._parameters = parameters
        self._values = {}
        for name, value in values.items():
            self.set(name, value)

    def _check_name(self, name):
        if name not in self.FIELDS:
            raise KeyError('unknown deployment setting: %s' % name)

    def get(self, name):
        self._check_name(name)
        if name in self._values:
            return self._values[name]
        return self._parameters.get(PARAM_PREFIX + name, self.DEFAULTS[name])

    def set(self, name, value):
        self._check_name(name)
        self._values[name] = value

    def validate(self):
        for name in self.FIELDS:
            value = self.get(name)
            allowed = self.CHOICES[name].TYPES
            if value not in allowed:
                raise InvalidSettingError(name, value, allowed)

    def save(self):
        self.validate()
        for name in self.FIELDS:
            self._parameters[PARAM_PREFIX + name] = self.get(name)
        self._values = {}

    def as_dict(self):
        return dict((name, self.get(name)) for name in self.FIELDS)
