import copy
import logging
from enum import Enum, auto


logger = logging.getLogger(__name__)


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()
    NETWORK       = auto()  # big endian, but says why

    @property
    def prefix(self):
        return '<' if self == Endianess.LITTLE_ENDIAN else '>'


class FieldDescriptor(object):
    """Wrapper around field access of a Structure: the field declared in the class
    body is only a prototype, each instance gets its own copy the first time the
    field is accessed."""

    def __init__(self, field_instance: "FieldBase", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self

        data = instance.__dict__

        if self.field.name not in data:
            logger.debug("create new field for field named '%s'", self.field.name)
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        data = instance.__dict__

        # if the value is the same type then set as it is
        if isinstance(value, self.field.__class__):
            value.father = instance
            value.name = self.field.name
            data[self.field.name] = value
        # otherwise delegate to the field
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_structure(self, cls, name):
        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the abstraction"""

    def __init__(self):
        self.fields = []


class MetaStructure(type):

    def __new__(cls, names, bases, attrs):
        '''Fields are collected in order of declaration, a bit like Django does with models.'''
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)

        new_attrs = {
            '__module__': module,
        }
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaStructure, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaStructure)]
        for parent in parents:
            for obj_name in parent._meta.fields:
                if obj_name not in new_cls._meta.fields:
                    new_cls._meta.fields.append(obj_name)

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        return new_cls

    def add_to_class(cls, name, value):
        if isinstance(value, FieldBase):
            logger.debug('field \'%s\' found for class \'%s\'' % (name, cls.__name__))
            if name not in cls._meta.fields:
                cls._meta.fields.append(name)
            value.contribute_to_structure(cls, name)
        else:
            setattr(cls, name, value)
