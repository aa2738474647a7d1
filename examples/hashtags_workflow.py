"""
Example of staging input data and launching a Spark job.

This example walks through the two-step hashtags workflow: an init script
clears and restages the HDFS directories, then the Spark application is
submitted to YARN.
"""

from hadoop_tasklets import JobConfig, TaskletJob
from hadoop_tasklets.config import HadoopConfig, ScriptConfig, SparkConfig
from hadoop_tasklets.fs import InMemoryFileSystem
from hadoop_tasklets.workflow import build_launch_request, create_job_submitter


def example_job_config():
    """Example of configuring the hashtags job."""

    # 1. Cluster endpoints
    print("=== Configuring Cluster ===")
    hadoop = HadoopConfig(
        fs_uri="hdfs://localhost:8020",
        resource_manager="localhost",
    )

    # 2. Spark application
    print("\n=== Configuring Spark Application ===")
    spark = SparkConfig(
        app_class="Hashtags",
        app_jar="app/spark-hashtags_2.10-0.1.0.jar",
        assembly_jar="hdfs:///app/spark/spark-assembly-1.5.0-hadoop2.6.0.jar",
        executor_memory="1G",
        executor_count=1,
    )

    # 3. Job with staging directories and arguments
    print("\n=== Configuring Job ===")
    config = JobConfig(
        name="hashtags",
        input_dir="/tmp/hashtags/input",
        output_dir="/tmp/hashtags/output",
        local_data="data/tweets.dat",
        arguments=["${fs_prefix}${input_dir}/tweets.dat", "${fs_prefix}${output_dir}"],
        hadoop=hadoop,
        spark=spark,
    )

    # 4. Show the submit command
    print("\n=== spark-submit Command ===")
    command = create_job_submitter(config).build_command(build_launch_request(config))
    print(" ".join(command))

    return config


def example_custom_script(local_data: str):
    """Example of a custom init script run against an in-memory filesystem."""
    print("\n=== Running Custom Init Script ===")

    config = JobConfig(
        name="hashtags-dry",
        input_dir="/tmp/hashtags/input",
        output_dir="/tmp/hashtags/output",
        local_data=local_data,
        hadoop=HadoopConfig(filesystem="memory"),
        script=ScriptConfig(
            body=(
                "if-exists ${input_dir}: rmr ${input_dir}\n"
                "mkdir ${input_dir}\n"
                "put ${local_data} ${input_dir}\n"
                "ls ${input_dir}\n"
            )
        ),
    )

    fs = InMemoryFileSystem()
    result = TaskletJob(config, fs=fs).run_init_script()

    print(f"Init script: {result.status.value}")
    if not result.succeeded:
        print(f"  {result.error_kind.value if result.error_kind else 'ERROR'}: {result.diagnostic}")
    else:
        for path in fs.list_dir("/tmp/hashtags/input"):
            print(f"  - {path}")

    return result


if __name__ == "__main__":
    print("=" * 60)
    print("Hadoop Tasklets - Hashtags Workflow Example")
    print("=" * 60)

    config = example_job_config()
    example_custom_script(__file__)

    print("\n" + "=" * 60)
    print("\nTo actually run the workflow against a cluster:")
    print("1. Start HDFS and YARN (namenode on localhost:8020)")
    print("2. Build the application jar into app/")
    print("3. Run: hadoop-tasklets run --preset hashtags")
    print("=" * 60)
