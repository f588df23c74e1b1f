"""
Entry point for the FitTracker client.
This module provides a command-line interface to the FitTracker service.
"""

import argparse
import sys

from FitTracker.config import config
from FitTracker.core.logging import auto_configure
from FitTracker.start import client


def parse(argv=None):
    # Initialize argument parser for command line interface
    parser = argparse.ArgumentParser(prog='FitTracker', description='FitTracker client')
    parser.add_argument('--api-url', default=config.API_URL,
                        help=f'Backend API root (default: {config.API_URL})')
    parser.add_argument('--env', default=None,
                        help='Logging environment: development, production, testing')
    subparsers = parser.add_subparsers(dest='command', required=True, help='Available commands')

    login_parser = subparsers.add_parser('login', help='Log in to your account')
    login_parser.add_argument('--email', help='Account email (prompted if omitted)')
    login_parser.add_argument('--password', help='Password (prompted if omitted)')

    register_parser = subparsers.add_parser('register', help='Create an account')
    register_parser.add_argument('--name', required=True, help='Display name')
    register_parser.add_argument('--email', required=True, help='Account email')
    register_parser.add_argument('--password', help='Password (prompted if omitted)')
    _add_profile_arguments(register_parser)

    subparsers.add_parser('logout', help='Log out and forget stored credentials')
    subparsers.add_parser('whoami', help='Show the signed-in profile')

    profile_parser = subparsers.add_parser('profile', help='Update your profile')
    profile_parser.add_argument('--name', help='Display name')
    _add_profile_arguments(profile_parser)

    subparsers.add_parser('workouts', help='List logged workouts')

    workout_parser = subparsers.add_parser('log-workout', help='Log a workout')
    workout_parser.add_argument('--title', required=True, help='Workout title')
    workout_parser.add_argument('--type', default='other', help='Workout type (default: other)')
    workout_parser.add_argument('--duration', type=int, required=True, help='Duration in minutes')
    workout_parser.add_argument('--calories', type=int, default=0, help='Calories burned')
    workout_parser.add_argument('--distance', type=float, default=0, help='Distance in km')
    workout_parser.add_argument('--notes', default='', help='Free-form notes')

    subparsers.add_parser('goals', help='List goals')
    subparsers.add_parser('stats', help='Show workout summary stats')

    return parser.parse_args(argv)


def _add_profile_arguments(parser):
    parser.add_argument('--age', type=int, help='Age in years')
    parser.add_argument('--weight', type=float, help='Weight in kg')
    parser.add_argument('--height', type=float, help='Height in cm')
    parser.add_argument('--goal', choices=['Lose Weight', 'Build Muscle', 'Stay Fit', 'Improve Endurance'],
                        help='Fitness goal')


def main(argv=None):
    args = parse(argv)
    auto_configure(args.env)

    options = {k: v for k, v in vars(args).items() if k not in ('command', 'api_url', 'env')}
    return client.client(args.command, options, api_url=args.api_url)


if __name__ == '__main__':
    sys.exit(main())
