#!/usr/bin/env python
"""
Test runner for the nursery apps
Usage: python run_tests.py [app labels...]
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'nursery.core',
    'nursery.locations',
    'nursery.catalog',
    'nursery.inventory',
    'nursery.pricing',
    'nursery.parties',
    'nursery.sales',
    'nursery.ipm',
    'nursery.labels',
]

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'nursery.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(sys.argv[1:] or APPS)
    sys.exit(bool(failures))
