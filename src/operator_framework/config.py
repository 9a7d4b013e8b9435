"""oslo.config options for the operator framework.

Only a handful of knobs live here; everything specific to running the agent
is read from its YAML configuration file (see :mod:`operator_agent.config`).
"""

from oslo_config import cfg

DEFAULT_FINALIZER = "operator.default.finalizer"

CONF = cfg.CONF

operator_group = cfg.OptGroup(
    name="operator",
    title="Operator framework options",
)

operator_opts = [
    cfg.StrOpt('default_finalizer',
               default=DEFAULT_FINALIZER,
               help='Finalizer token added to every reconciled resource '
                    'whose controller does not declare its own '
                    'finalizer_name.'),
]


def register_opts(conf=CONF):
    """Register the framework options on ``conf``.

    Safe to call more than once; oslo.config ignores identical
    re-registrations.
    """
    conf.register_group(operator_group)
    conf.register_opts(operator_opts, group=operator_group)


def default_finalizer(conf=CONF):
    register_opts(conf)
    return conf.operator.default_finalizer
