"""
LegFed converter commands.

Usage:
    legfed file qtl-file data/qtl/*.txt --output items.xml
    legfed file genetic-marker-gff markers.gff3 --taxon-id 3885
    legfed fasta phavu.G19833.gnm2.fC0g.genome_main.fna.gz --data-set-title "..."
    legfed chado --organisms "3885 3827_desi" --processors "genetic featureprop"
    legfed pubmed --journal "Theor Appl Genet" --year 2012 --author Blair
"""

import argparse
import logging
import sys
from pathlib import Path

from legfed.chado import ChadoDBConverter
from legfed.converters import FILE_CONVERTERS, FastaFileConverter, GeneticMarkerGFFConverter
from legfed.core.exceptions import LegfedError
from legfed.core.settings import settings
from legfed.db.engine import SessionLocal, build_engine
from legfed.items.writer import ItemWriter, MemoryItemWriter, XmlItemWriter
from legfed.services.pubmed import get_pubmed_id
from legfed.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def collect_input_files(paths: list[Path]) -> list[Path]:
    """
    Expand directories into the files they contain.

    Raises:
        FileNotFoundError: if a path does not exist
    """
    files = []
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        if path.is_dir():
            files.extend(sorted(p for p in path.iterdir() if p.is_file()))
        else:
            files.append(path)
    return files


def make_writer(args: argparse.Namespace) -> ItemWriter:
    if args.dry_run:
        logger.info("DRY RUN - items are not written")
        return MemoryItemWriter()
    output = args.output or Path(settings.items_file)
    logger.info(f"Writing items to {output}")
    return XmlItemWriter(output)


def log_summary(title: str, writer: ItemWriter, stats: dict = None) -> None:
    logger.info("=" * 50)
    logger.info(f"{title}:")
    for key, value in (stats or {}).items():
        logger.info(f"  {key.replace('_', ' ').capitalize()}: {value}")
    for class_name, count in sorted(writer.counts.items()):
        logger.info(f"  {class_name}: {count}")
    logger.info(f"  Total items: {writer.total}")
    logger.info("=" * 50)


def cmd_file(args: argparse.Namespace) -> None:
    """Run one flat-file converter over the given files."""
    files = collect_input_files(args.paths)
    converter_cls = FILE_CONVERTERS[args.format]

    with make_writer(args) as writer:
        if converter_cls is GeneticMarkerGFFConverter:
            converter = converter_cls(writer, taxon_id=args.taxon_id, variety=args.variety)
        else:
            converter = converter_cls(writer)
        stats = converter.run(files)
        log_summary(f"{args.format} Summary", writer, stats)


def cmd_fasta(args: argparse.Namespace) -> None:
    """Load sequences from datastore FASTA files."""
    files = collect_input_files(args.paths)

    with make_writer(args) as writer:
        converter = FastaFileConverter(
            writer,
            class_name=args.class_name,
            data_set_title=args.data_set_title,
            data_set_url=args.data_set_url,
            id_suffix=args.id_suffix,
        )
        stats = converter.run(files)
        stats.update(converter.stats)
        log_summary("FASTA Summary", writer, stats)


def cmd_chado(args: argparse.Namespace) -> None:
    """Run the configured chado processors."""
    database_url = args.database_url or settings.database_url
    if not database_url:
        raise LegfedError("DATABASE_URL is not set")

    if args.database_url:
        session = SessionLocal(bind=build_engine(args.database_url))
    else:
        session = SessionLocal()

    try:
        with make_writer(args) as writer:
            converter = ChadoDBConverter(
                writer,
                session,
                organisms=args.organisms,
                strains=args.strains,
                homologue_organisms=args.homologue_organisms,
                homologue_strains=args.homologue_strains,
                processors=args.processors,
                reactome_file=args.reactome_file,
                phytozome_version=args.phytozome_version,
            )
            converter.process()
            stats = {
                "processors_run": ", ".join(p.name for p in converter.completed_processors),
                "chado_organisms": len(converter.chado_to_org_data),
            }
            log_summary("Chado Summary", writer, stats)
    finally:
        session.close()


def cmd_pubmed(args: argparse.Namespace) -> None:
    """Print the PubMed ID for a citation, or 0 when not uniquely found."""
    pubmed_id = get_pubmed_id(args.journal, args.year, args.author)
    logger.info(f"PubMed ID: {pubmed_id}")
    print(pubmed_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert LIS data files and chado databases into InterMine items",
        prog="legfed",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help=f"Items XML file (default: ITEMS_FILE setting, {settings.items_file})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Convert but don't write items",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Path to log file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    file_parser = subparsers.add_parser("file", help="Convert flat data files")
    file_parser.add_argument("format", choices=sorted(FILE_CONVERTERS), help="Input file format")
    file_parser.add_argument("paths", nargs="+", type=Path, help="Input files or directories")
    file_parser.add_argument("--taxon-id", help="Taxon ID for files without a #TaxonID header")
    file_parser.add_argument("--variety", help="Variety for files without a #Variety header")

    fasta_parser = subparsers.add_parser("fasta", help="Load sequences from datastore FASTA files")
    fasta_parser.add_argument("paths", nargs="+", type=Path, help="FASTA files or directories")
    fasta_parser.add_argument(
        "--class-name",
        default="Chromosome",
        help="Class of the loaded entities (default: Chromosome)",
    )
    fasta_parser.add_argument("--data-set-title", help="DataSet title (default: DATA_SET_TITLE setting)")
    fasta_parser.add_argument("--data-set-url", help="DataSet URL (default: DATA_SET_URL setting)")
    fasta_parser.add_argument("--id-suffix", default="", help="Suffix appended to each record identifier")

    chado_parser = subparsers.add_parser("chado", help="Convert a chado database")
    chado_parser.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL setting)")
    chado_parser.add_argument("--organisms", help="Space-separated taxon IDs (default: ORGANISMS setting)")
    chado_parser.add_argument("--strains", help="Space-separated strain names (default: STRAINS setting)")
    chado_parser.add_argument("--homologue-organisms", help="Space-separated homologue taxon IDs")
    chado_parser.add_argument("--homologue-strains", help="Space-separated homologue strain names")
    chado_parser.add_argument(
        "--processors",
        help="Space-separated processors to run in order (default: PROCESSORS setting)",
    )
    chado_parser.add_argument("--reactome-file", help="Reactome pathway file for the reactome processor")
    chado_parser.add_argument(
        "--phytozome-version",
        help="Phytozome release prefix of phylotree names for the homology processor (default: PHYTOZOME_VERSION setting)",
    )

    pubmed_parser = subparsers.add_parser("pubmed", help="Look up a PubMed ID from citation details")
    pubmed_parser.add_argument("--journal", required=True, help="Journal name")
    pubmed_parser.add_argument("--year", required=True, type=int, help="Publication year")
    pubmed_parser.add_argument("--author", action="append", default=[], help="Author surname (repeatable)")

    return parser


COMMANDS = {
    "file": cmd_file,
    "fasta": cmd_fasta,
    "chado": cmd_chado,
    "pubmed": cmd_pubmed,
}


def main() -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command not in COMMANDS:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_file, args.verbose, settings.log_level)

    try:
        COMMANDS[args.command](args)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except LegfedError as e:
        logger.error(f"Conversion failed: {e}")
        logger.exception("Full traceback:")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.exception("Full traceback:")
        sys.exit(1)


if __name__ == "__main__":
    main()
