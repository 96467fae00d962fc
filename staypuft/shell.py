#!/usr/bin/env python
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

import click
import yaml

import logging
import os.path
import traceback

from staypuft.catalog import CatalogResolver
from staypuft.config import load_config
from staypuft.deployment import Deployment
from staypuft.exceptions import ConfigError
from staypuft import logger
from staypuft import params
from staypuft.passwords import Passwords
from staypuft import progress
from staypuft.puppet import MemoryClassCatalog
from staypuft.store import MemoryStore
from staypuft.utils import load_yaml


LOG = logging.getLogger('staypuft')


def load_state(state_file, config):
    """Restore the store and the class catalog saved by a previous run."""
    if state_file and os.path.exists(state_file):
        with open(state_file) as fd:
            state = yaml.safe_load(fd) or {}
        return (MemoryStore.load(state.get('store')),
                MemoryClassCatalog.load(state.get('puppetclasses')))
    return (MemoryStore(),
            MemoryClassCatalog.from_file(config['puppetclasses']))


def save_state(state_file, store, classes):
    with open(state_file, 'w') as fd:
        yaml.safe_dump({'store': store.dump(), 'puppetclasses': classes.dump()},
                       fd, default_flow_style=False)


def get_deployment(config, store, classes, create=True):
    settings = dict(config['deployment'])
    name = settings.pop('name')
    description = settings.pop('description', None)
    passwords = Passwords(**config['passwords'])
    deployment = Deployment.find(name, store, classes, passwords=passwords)
    if deployment is None:
        if not create:
            raise ConfigError('no deployment %s' % name)
        LOG.info('new deployment %s' % name)
        deployment = Deployment(name, store, classes,
                                description=description,
                                passwords=passwords)
    elif description is not None:
        deployment.description = description
    for key, value in settings.items():
        deployment.settings.set(key, value)
    return deployment


def seed(config, store, classes):
    resolver = CatalogResolver(
        store, classes, params.load_default_params(config['params']))
    report = resolver.seed(load_yaml(config['catalog']))
    resolver.seed_functional_dependencies(
        load_yaml(config['functional_dependencies']))
    click.echo(str(report))


def layout(config, store, classes):
    deployment = get_deployment(config, store, classes)
    deployment.save()
    result = deployment.update_hostgroup_list()
    for creation in result.create:
        click.echo('create: %s (%d)' % (creation.role.name,
                                        creation.deploy_order))
    for update in result.update:
        click.echo('update: %s (%d -> %d)' % (
            update.binding.role.name, update.old_order, update.deploy_order))
    for binding in result.delete:
        click.echo('delete: %s' % binding.role.name)
    for binding in deployment.role_hostgroups:
        click.echo('% 3d %s' % (binding.deploy_order, binding.hostgroup.title))


def show_params(config, store, classes):
    deployment = get_deployment(config, store, classes, create=False)
    click.echo(yaml.safe_dump(deployment.render_parameters(),
                              default_flow_style=False))


def show_progress(config, store, classes):
    fractions = []
    for host_name in sorted(config['progress']):
        host_fractions = config['progress'][host_name]
        fractions.extend(host_fractions)
        click.echo(progress.humanized_output(host_fractions, host_name))
    click.echo(progress.humanized_output(fractions, 'total'))


def destroy(config, store, classes):
    deployment = Deployment.find(config['deployment']['name'], store, classes)
    if deployment is None:
        raise ConfigError('no deployment %s' % config['deployment']['name'])
    deployment.destroy()


STEPS = {
    'seed': seed,
    'layout': layout,
    'params': show_params,
    'progress': show_progress,
    'destroy': destroy,
}


@click.command()
@click.option('--config-file', required=True, type=click.File('rb'),
              help="Staypuft configuration file.")
@click.option('--state-file', envvar='STAYPUFT_STATE_FILE',
              help="Where the deployments and the catalog are saved.")
@click.option('--log-file', required=False,
              help="Also write the logs in this file.")
@click.argument('step', nargs=1, required=True,
                type=click.Choice(['seed', 'layout', 'params', 'progress',
                                   'destroy']))
def cli(config_file, state_file, log_file, step):
    config = load_config(config_file, step)
    logger.setup_logging(config_file=log_file)
    state_file = state_file or config.get('state_file')
    if not state_file:
        raise click.UsageError('a state file is required')

    store, classes = load_state(state_file, config)
    try:
        STEPS[step](config, store, classes)
    except Exception as e:
        LOG.error(traceback.format_exc())
        raise e
    save_state(state_file, store, classes)

# This is for setuptools entry point.
main = cli
