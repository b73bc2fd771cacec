#!/usr/bin/env python3
"""
Firestore Schema Inference Runner

Samples documents from a Firestore database and writes the inferred schema
(field paths, types, counts and example values) to a JSON file.

Usage:
    export FIRESTORE_API_TOKEN="$(gcloud auth print-access-token)"
    python run_schema_inference.py --project my-project --database my-db \
        --sample 20 --out schema.json --recurse --depth 2
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from schema_sampler.core.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_SAMPLE_SIZE,
    InferenceConfig,
    TargetIdentity,
    resolve_credential,
    resolve_database_id,
    resolve_project_id,
)
from schema_sampler.core.errors import ConfigurationError

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Infer Firestore collection schemas by sampling documents")
    parser.add_argument("--project", help="Firebase project id (default: $FIREBASE_PROJECT_ID)")
    parser.add_argument("--database", help="Firestore database id (default: $FIRESTORE_DATABASE_ID or '(default)')")
    parser.add_argument("--token", help="Bearer access token (default: $FIRESTORE_API_TOKEN)")
    parser.add_argument("--gcloud-token", action="store_true",
                        help="Get the access token from 'gcloud auth print-access-token' when none is given")
    parser.add_argument("--sample", type=int, default=DEFAULT_SAMPLE_SIZE,
                        help=f"Documents to sample per collection (default: {DEFAULT_SAMPLE_SIZE})")
    parser.add_argument("--path", help="Sample only this collection path instead of all root collections")
    parser.add_argument("--recurse", action="store_true", help="Follow sub-collections of sampled documents")
    parser.add_argument("--depth", type=int, default=DEFAULT_MAX_DEPTH,
                        help=f"Maximum sub-collection depth when --recurse is set (default: {DEFAULT_MAX_DEPTH})")
    parser.add_argument("--out", help="Output JSON file (default: firestore-schema-<project>-<database>-<ts>.json)")
    parser.add_argument("--backend", choices=["rest", "admin"], default="rest",
                        help="Use the REST API with a bearer token, or the Firebase Admin SDK (default: rest)")
    parser.add_argument("--request-timeout", type=float,
                        help="Seconds before a REST request is abandoned (default: no timeout)")
    parser.add_argument("--log_level", "--log-level", dest="log_level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO", help="Set logging level")
    return parser


def create_store(args, target: TargetIdentity):
    """Build the document store for the selected backend"""
    if args.backend == "admin":
        from schema_sampler.clients.firestore_admin import FirestoreAdminClient
        return FirestoreAdminClient(target)

    from schema_sampler.clients.firestore_rest import FirestoreRestClient
    token = resolve_credential(args.token, use_gcloud=args.gcloud_token)
    client_config = {}
    if args.request_timeout is not None:
        if args.request_timeout <= 0:
            raise ConfigurationError(f"Request timeout must be positive, got {args.request_timeout}")
        client_config['request_timeout'] = args.request_timeout
    return FirestoreRestClient(target, token, client_config)


def main(argv=None) -> int:
    """Parse arguments, run the inference job and report the outcome"""
    load_dotenv()

    args = build_parser().parse_args(argv)
    logging.getLogger().setLevel(getattr(logging, args.log_level))
    logger = logging.getLogger("schema_inference")

    from schema_sampler.jobs.schema_inference_job import SchemaInferenceJob

    try:
        target = TargetIdentity(
            project_id=resolve_project_id(args.project),
            database_id=resolve_database_id(args.database)
        )
        inference_config = InferenceConfig(
            target=target,
            sample_size=args.sample,
            start_path=args.path,
            recurse=args.recurse,
            max_depth=args.depth
        )
        inference_config.validate()
        store = create_store(args, target)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    job = SchemaInferenceJob("schema_inference", inference_config, store, {'output_path': args.out})
    result = job.execute()

    if not result.success:
        print(f"Failed: {result.error_message}", file=sys.stderr)
        return 1

    print(f"Wrote schema to {job.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
