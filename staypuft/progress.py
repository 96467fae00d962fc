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

import decimal

from staypuft.exceptions import NoProgressDataError

ROUND_DOWN = decimal.ROUND_DOWN
ROUND_HALF_UP = decimal.ROUND_HALF_UP


def aggregate(fractions, rounding=ROUND_DOWN, strict=False):
    """Average progress of workflow steps, as an integer percentage.

    :param fractions: the progress of each step of each host, between 0
    and 1
    :param rounding: ROUND_DOWN truncates (62.5 -> 62), ROUND_HALF_UP
    rounds the halves up (62.5 -> 63)
    :param strict: if True, raise NoProgressDataError when there is no
    step at all instead of returning 0
    """
    if rounding not in (ROUND_DOWN, ROUND_HALF_UP):
        raise ValueError('unsupported rounding: %s' % rounding)
    total = decimal.Decimal(0)
    count = 0
    for fraction in fractions:
        if not 0 <= fraction <= 1:
            raise ValueError('progress out of range: %r' % (fraction,))
        total += decimal.Decimal(str(fraction))
        count += 1
    if not count:
        if strict:
            raise NoProgressDataError('no step reported any progress')
        return 0
    percent = total * 100 / count
    return int(percent.quantize(decimal.Decimal(1), rounding=rounding))


def humanized_output(fractions, name, rounding=ROUND_DOWN):
    return '%3d%% %s' % (aggregate(fractions, rounding), name)
