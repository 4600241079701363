from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from apps.analysis.services.vocabulary import SCHEMES, VocabularyError, load_vocabulary


class Command(BaseCommand):
    help = "Load the controlled vocabularies and report how many tags and codes each list holds."

    def add_arguments(self, parser):
        parser.add_argument("--data-dir", type=str, default="", help="Optional directory holding the JSON lists.")

    def handle(self, *args, **options):
        data_dir = str(options.get("data_dir", "")).strip() or None
        try:
            vocabulary = load_vocabulary(data_dir)
        except VocabularyError as exc:
            raise CommandError(str(exc)) from exc

        summary = vocabulary.summary()
        empty = [name for name, count in summary.items() if count == 0]
        self.stdout.write(f"tags: {summary['tags']}")
        for scheme in SCHEMES:
            self.stdout.write(f"{scheme}: {summary[scheme]}")
        if empty:
            raise CommandError(f"Empty vocabulary list(s): {', '.join(empty)}")
        self.stdout.write(self.style.SUCCESS("Controlled vocabularies are valid."))
