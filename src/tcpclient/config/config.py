import os
import platform

from configobj import ConfigObj, ConfigObjError, flatten_errors
from validate import Validator

# The default extension for configuration files
config_extension = '.cfg'


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('tcpclient', 'default')
    'tcpclient.default'
    >>> config_flavor('tcpclient')
    'tcpclient'
    """
    return name if not flavor else name + '.' + flavor


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, flavor=None) -> ConfigObj:
    """
    Loads a specialization of a config file, named after the base followed by a period and the
    specialization. A missing file gives an empty configuration.
    """
    return load_config_file_base(config_filename(config_flavor(name, flavor), directory), must_exist=False)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def load_config(name, directory, configspec, user_directory='~'):
    """
        Loads all the configuration files that relate to the given name.
        Later files override earlier ones:
        - the default specialization
        - the platform specialization
        - the user override, in the user's home directory
        - the base configuration
        The merged configuration is validated against the configspec, which also supplies
        defaults and converts values to their declared types.
    :param configspec: the schema, as a filename or a list of lines
    :raises ConfigObjError: when the merged configuration does not validate
    """
    config = ConfigObj(configspec=configspec)
    config.merge(config_flavor_file(name, directory, 'default'))
    config.merge(config_flavor_file(name, directory, os_name()))
    config.merge(config_flavor_file(name, os.path.expanduser(user_directory)))
    config.merge(config_flavor_file(name, directory))

    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        problems = ["%s: %s" % ('.'.join(sections + [key or '']), error or 'missing')
                    for sections, key, error in flatten_errors(config, result)]
        raise ConfigObjError("the config file %s failed validation %s" % (name, ', '.join(problems)))
    return config


def apply_conf(conf, target):
    """
    Applies the attributes contained in a configuration object to a target object.
    Values with no matching attribute on the target are ignored.
    """
    for k, v in conf.items():
        if hasattr(target, k):
            setattr(target, k, v)
    return target
